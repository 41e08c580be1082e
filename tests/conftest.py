from typing import Dict, List, Optional

import numpy as np
import pytest

from scenepilot.core.constants import AlgorithmKind
from scenepilot.modules.assistant import Assistant
from scenepilot.modules.graph import GraphConfig, Rect
from scenepilot.modules.vision import MatchOutcome


def blank_frame(width: int = 1280, height: int = 720) -> np.ndarray:
    return np.zeros((height, width, 3), dtype=np.uint8)


class FakeTarget:
    def __init__(self, name: str = "emu", *, bound: bool = True, resizable: bool = True, offsets=(0, 0)):
        self.name = name
        self.bound = bound
        self.resizable = resizable
        self.offsets = offsets
        self.frame: Optional[np.ndarray] = blank_frame()
        self.clicks: List[Rect] = []
        self.restores = 0

    def get_frame(self):
        return self.frame

    def get_window_bounds(self) -> Rect:
        return Rect(0, 0, 1280, 720)

    def get_target_offsets(self):
        return self.offsets

    def click(self, rect: Rect) -> None:
        self.clicks.append(rect)

    def restore_window(self) -> bool:
        self.restores += 1
        return True

    def resize_window(self) -> bool:
        return self.resizable

    def is_bound(self) -> bool:
        return self.bound


class FakeMatcher:
    def __init__(self) -> None:
        self.outcomes: Dict[str, MatchOutcome] = {}
        self.references: Dict[str, Optional[str]] = {}
        self.calls: List[str] = []
        self.cache_enabled: Optional[bool] = None
        self.cache_clears = 0
        self.error: Optional[Exception] = None

    def hit(self, name: str, rect: Optional[Rect] = None, score: float = 1.0,
            kind: AlgorithmKind = AlgorithmKind.MATCH_TEMPLATE) -> None:
        self.outcomes[name] = MatchOutcome(kind=kind, score=score, rect=rect or Rect(10, 10, 20, 20))

    def miss(self, name: str) -> None:
        self.outcomes[name] = MatchOutcome(kind=AlgorithmKind.MATCH_TEMPLATE, score=0.1)

    def register_reference(self, name, path) -> bool:
        self.references[name] = path
        return True

    def set_cache_enabled(self, enabled: bool) -> None:
        self.cache_enabled = enabled

    def clear_cache(self) -> None:
        self.cache_clears += 1

    def find(self, image, name, threshold) -> MatchOutcome:
        if self.error is not None:
            raise self.error
        self.calls.append(name)
        return self.outcomes.get(name, MatchOutcome(kind=AlgorithmKind.UNKNOWN, score=0.0))


def make_config(tasks: dict, options: Optional[dict] = None, targets: Optional[dict] = None) -> GraphConfig:
    return GraphConfig.from_dict({
        "options": {"identify_delay": 0, **(options or {})},
        "targets": targets or {"emu": {"adb_addr": "127.0.0.1:7555"}},
        "tasks": tasks,
    })


@pytest.fixture()
def build(tmp_path):
    """构建一个不启动循环线程的助手，返回 (assistant, matcher, target)"""
    created = []

    def _build(tasks, options=None, *, target=None, start_worker=False, bind=True):
        cfg = make_config(tasks, options)
        matcher = FakeMatcher()
        target = target or FakeTarget()
        assistant = Assistant(
            cfg,
            matcher,
            target_factory=lambda profile, opts: target,
            resource_dir=str(tmp_path),
            start_worker=start_worker,
        )
        created.append(assistant)
        if bind:
            assert assistant.bind_target() == "emu"
        return assistant, matcher, target

    yield _build

    for assistant in created:
        assistant.shutdown()


@pytest.fixture()
def step():
    """在持有锁的情况下跑一轮循环"""
    def _step(assistant: Assistant) -> None:
        with assistant._lock:
            assistant.run_cycle()

    return _step
