"""
日志配置模块
"""
import sys
from pathlib import Path
from loguru import logger
from .config import settings

_configured = False


def setup_logger(force: bool = False):
    """配置日志系统

    重复调用时保持已有处理器，force=True 时按当前 settings 重新配置。
    """
    global _configured
    if _configured and not force:
        return logger

    # 移除默认处理器
    logger.remove()

    # 创建日志目录
    log_dir = Path(settings.log_path)
    log_dir.mkdir(parents=True, exist_ok=True)

    # 控制台输出
    if settings.log_console_enabled:
        logger.add(
            sys.stdout,
            level=settings.log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{extra[module]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        )

    # 文件输出 - 全局日志
    logger.add(
        log_dir / "app_{time:YYYY-MM-DD}.log",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[module]}:{function}:{line} - {message}",
        rotation="00:00",  # 每天午夜轮转
        retention=f"{settings.log_retention_days} days",
        encoding="utf-8",
    )

    # 错误日志单独记录
    logger.add(
        log_dir / "error_{time:YYYY-MM-DD}.log",
        level="ERROR",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[module]}:{function}:{line} - {message}",
        rotation="00:00",
        retention=f"{settings.log_retention_days * 2} days",
        encoding="utf-8",
    )

    _configured = True
    return logger


# 未 bind module 的日志也能套用上面的格式
logger.configure(extra={"module": "-"})

# 初始化日志系统
logger = setup_logger()
