from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from ...core.constants import (
    ActionKind,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    SCREENSHOT_DIR,
)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.width // 2, self.y + self.height // 2)

    def random_point(self) -> Tuple[int, int]:
        """区域内随机一点（偏向中心的正态分布，落在区域外时截断）。"""
        if self.width <= 1 or self.height <= 1:
            return self.center
        cx, cy = self.center
        x = int(random.gauss(cx, self.width / 6))
        y = int(random.gauss(cy, self.height / 6))
        x = min(max(x, self.x), self.x + self.width - 1)
        y = min(max(y, self.y), self.y + self.height - 1)
        return (x, y)


@dataclass
class Task:
    name: str
    index: int
    action: ActionKind
    template: Optional[str] = None  # 模板图片文件名；为空时无条件命中
    threshold: float = 0.9
    cache_threshold: float = 0.9
    fixed_region: Optional[Rect] = None
    pre_delay: int = 0  # ms
    rear_delay: int = 0  # ms
    max_executions: Optional[int] = None  # None 表示不限次数
    next: Tuple[int, ...] = ()
    exceeded_next: Tuple[int, ...] = ()
    counter_debits: Tuple[int, ...] = ()
    # 运行期计数，可因 counter_debits 变为负数
    exec_count: int = 0

    @property
    def limit_reached(self) -> bool:
        return self.max_executions is not None and self.exec_count >= self.max_executions


@dataclass
class Options:
    identify_delay: int = 1000  # ms
    identify_cache: bool = True
    control_delay_lower: int = 0  # ms
    control_delay_upper: int = 0  # ms，为 0 时关闭随机延时
    print_window: bool = False
    print_window_delay: int = 0  # ms
    window_width: int = DEFAULT_WINDOW_WIDTH
    window_height: int = DEFAULT_WINDOW_HEIGHT
    screenshot_dir: str = SCREENSHOT_DIR


@dataclass
class TargetProfile:
    name: str
    adb_addr: str
    # 截图中画面相对于窗口的偏移（通常为负数或 0）
    x_offset: int = 0
    y_offset: int = 0


__all__ = ["Rect", "Task", "Options", "TargetProfile"]
