"""
运行会话：运行标志、候选任务集合，以及以运行标志为取消信号的可中断等待
"""
from __future__ import annotations

import threading
from typing import List, Optional, Sequence


class RunSession:
    """所有字段只在持有 cond 对应锁时读写。"""

    def __init__(self, cond: threading.Condition) -> None:
        self._cond = cond
        self.running = False
        self.candidates: List[int] = []  # 任务图下标
        self.target_bound = False
        self.target_name: Optional[str] = None

    def begin(self, candidates: Sequence[int]) -> None:
        self.candidates = list(candidates)
        self.running = True
        self._cond.notify_all()

    def cancel(self) -> None:
        """停止运行并唤醒所有等待者"""
        self.running = False
        self.candidates = []
        self._cond.notify_all()

    def wait(self, delay_ms: int) -> bool:
        """等待 delay_ms 毫秒，期间释放锁。

        返回 True 表示运行已被停止（剩余等待被放弃）。
        """
        if delay_ms <= 0:
            return not self.running
        return self._cond.wait_for(lambda: not self.running, timeout=delay_ms / 1000.0)


__all__ = ["RunSession"]
