"""
主程序入口
"""
from fastapi import FastAPI
from .core.logger import logger
from .core.config import settings
from .modules.assistant import build_assistant
from .modules.web import register_routers
from .modules.web.deps import current_assistant, set_assistant

# 创建FastAPI应用
app = FastAPI(
    title="scenepilot",
    description="基于画面识别的任务图自动化助手",
    version="1.0.0",
)

register_routers(app)


@app.on_event("startup")
async def startup():
    """应用启动事件"""
    logger.info("应用启动中...")
    assistant = build_assistant(settings)
    set_assistant(assistant)
    logger.info(f"任务图加载完成: {settings.config_path}")
    logger.info(f"应用启动完成，监听 {settings.api_host}:{settings.api_port}")


@app.on_event("shutdown")
async def shutdown():
    """应用关闭事件"""
    logger.info("应用关闭中...")
    assistant = current_assistant()
    if assistant is not None:
        assistant.shutdown()
        set_assistant(None)
    logger.info("应用关闭完成")


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
