"""
命令行启动入口。
设置 cwd → 启动 FastAPI 服务；可选自动绑定目标并从指定任务开始运行。
"""
import argparse
import os
import sys
import threading
import time
from pathlib import Path


def _get_app_dir() -> Path:
    """获取应用所在目录。"""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).resolve().parent
    else:
        return Path(__file__).resolve().parent


def _auto_start(target: str, task: str, timeout: float = 30.0) -> None:
    """等待助手初始化后绑定目标并启动任务。"""
    from scenepilot.core.logger import logger
    from scenepilot.modules.web.deps import current_assistant

    deadline = time.time() + timeout
    assistant = current_assistant()
    while assistant is None and time.time() < deadline:
        time.sleep(0.5)
        assistant = current_assistant()
    if assistant is None:
        logger.error("助手初始化超时，放弃自动启动")
        return

    name = assistant.bind_target(target or None)
    if name is None:
        logger.error("自动绑定目标失败")
        return
    assistant.start(task)


def main():
    parser = argparse.ArgumentParser(description="scenepilot 启动器")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--target", default="", help="目标名，留空自动探测")
    parser.add_argument("--task", default="", help="绑定后立即从该任务开始运行")
    args = parser.parse_args()

    app_dir = _get_app_dir()

    # 设置 cwd 到应用目录，保证 assets/ 与 screenshot/ 等相对路径有效
    os.chdir(app_dir)

    # 开发模式下确保 src 在 PYTHONPATH
    src_dir = str(app_dir / "src")
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)

    import uvicorn
    from scenepilot.core.config import settings
    from scenepilot.main import app

    host = args.host or settings.api_host
    port = args.port or settings.api_port
    print(f"[scenepilot] 正在启动服务 http://{host}:{port} ...")

    if args.task:
        threading.Thread(target=_auto_start, args=(args.target, args.task), daemon=True).start()

    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
