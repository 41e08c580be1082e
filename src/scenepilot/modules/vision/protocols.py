"""
Matcher contract consumed by the assistant loop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from ...core.constants import AlgorithmKind
from ..graph.types import Rect


@dataclass
class MatchOutcome:
    kind: AlgorithmKind
    score: float
    rect: Optional[Rect] = None


class Matcher(Protocol):
    def register_reference(self, name: str, path: Optional[str]) -> bool:
        """Register the reference image for a task; path=None means match unconditionally."""
        ...

    def set_cache_enabled(self, enabled: bool) -> None:
        ...

    def clear_cache(self) -> None:
        ...

    def find(self, image: np.ndarray, name: str, threshold: float) -> MatchOutcome:
        ...


__all__ = ["MatchOutcome", "Matcher"]
