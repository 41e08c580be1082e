"""
OpenCV matcher with a per-reference region cache.

A first successful template match (score >= threshold) remembers where the
reference was found. While caching is enabled, later lookups for the same
reference only compare the colour histogram of that region against the
reference instead of scanning the whole frame.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import cv2  # type: ignore
import numpy as np

from ...core.constants import AlgorithmKind
from ...core.logger import logger
from ..graph.types import Rect
from .protocols import MatchOutcome
from .utils import crop, hsv_histogram, load_image


@dataclass
class _Reference:
    image: Optional[np.ndarray]  # None: unconditional
    hist: Optional[np.ndarray] = None


class Identify:
    def __init__(self, use_cache: bool = True) -> None:
        self._refs: Dict[str, _Reference] = {}
        self._cache: Dict[str, Rect] = {}
        self._use_cache = use_cache
        self._log = logger.bind(module="Identify")

    def register_reference(self, name: str, path: Optional[str]) -> bool:
        if path is None:
            self._refs[name] = _Reference(image=None)
            return True
        try:
            mat = load_image(path)
        except (FileNotFoundError, ValueError) as e:
            self._log.error(f"模板加载失败: {name}: {e}")
            self._refs.pop(name, None)
            return False
        self._refs[name] = _Reference(image=mat, hist=hsv_histogram(mat))
        self._log.debug(f"模板已注册: {name}, 尺寸: {mat.shape}")
        return True

    def set_cache_enabled(self, enabled: bool) -> None:
        self._use_cache = bool(enabled)
        if not self._use_cache:
            self._cache.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    def find(self, image: np.ndarray, name: str, threshold: float) -> MatchOutcome:
        ref = self._refs.get(name)
        if ref is None:
            return MatchOutcome(kind=AlgorithmKind.UNKNOWN, score=0.0)
        if ref.image is None:
            return MatchOutcome(kind=AlgorithmKind.JUST_RETURN, score=1.0)

        if self._use_cache and name in self._cache:
            rect = self._cache[name]
            try:
                region = crop(image, rect.x, rect.y, rect.width, rect.height)
            except ValueError:
                # 画面尺寸变化，缓存失效
                self._cache.pop(name, None)
            else:
                score = cv2.compareHist(hsv_histogram(region), ref.hist, cv2.HISTCMP_CORREL)
                return MatchOutcome(kind=AlgorithmKind.COMPARE_HIST, score=float(score), rect=rect)

        return self._match_template(image, name, ref.image, threshold)

    def _match_template(self, image: np.ndarray, name: str, tpl: np.ndarray, threshold: float) -> MatchOutcome:
        ih, iw = image.shape[:2]
        th, tw = tpl.shape[:2]
        if th > ih or tw > iw:
            self._log.warning(f"模板大于截图: {name}, 模板 {tw}x{th}, 截图 {iw}x{ih}")
            return MatchOutcome(kind=AlgorithmKind.MATCH_TEMPLATE, score=0.0)

        res = cv2.matchTemplate(image, tpl, cv2.TM_CCOEFF_NORMED)
        _, max_val, _, max_loc = cv2.minMaxLoc(res)
        rect = Rect(max_loc[0], max_loc[1], tw, th)
        score = float(max_val)

        if self._use_cache and score >= threshold:
            self._cache[name] = rect
        return MatchOutcome(kind=AlgorithmKind.MATCH_TEMPLATE, score=score, rect=rect)


__all__ = ["Identify"]
