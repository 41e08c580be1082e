"""
Capture / control contracts consumed by the assistant loop.
"""
from __future__ import annotations

from typing import Optional, Protocol, Tuple

import numpy as np

from ..graph.types import Rect


class CaptureFacade(Protocol):
    def get_frame(self) -> Optional[np.ndarray]:
        """Current frame of the target surface, or None when capture failed."""
        ...

    def get_window_bounds(self) -> Rect:
        ...

    def get_target_offsets(self) -> Tuple[int, int]:
        ...


class ControlFacade(Protocol):
    def click(self, rect: Rect) -> None:
        ...

    def restore_window(self) -> bool:
        ...

    def resize_window(self) -> bool:
        ...

    def is_bound(self) -> bool:
        ...


class Target(CaptureFacade, ControlFacade, Protocol):
    name: str


__all__ = ["CaptureFacade", "ControlFacade", "Target"]
