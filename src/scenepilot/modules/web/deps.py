"""
路由依赖：进程内唯一的助手实例
"""
from typing import Optional

from fastapi import HTTPException, status

from ..assistant import Assistant

_assistant: Optional[Assistant] = None


def set_assistant(assistant: Optional[Assistant]) -> None:
    global _assistant
    _assistant = assistant


def current_assistant() -> Optional[Assistant]:
    return _assistant


def get_assistant() -> Assistant:
    if _assistant is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="助手未初始化")
    return _assistant
