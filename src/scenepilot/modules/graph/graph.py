from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .types import Task


class TaskGraph:
    """任务图：按加载顺序保存任务，跳转关系以下标引用。"""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: List[Task] = []
        self._index: Dict[str, int] = {}
        for task in tasks:
            self.add(task)

    def add(self, task: Task) -> None:
        if task.name in self._index:
            raise ValueError(f"duplicate task name: {task.name}")
        task.index = len(self._tasks)
        self._index[task.name] = task.index
        self._tasks.append(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, idx: int) -> Task:
        return self._tasks[idx]

    def get(self, name: str) -> Optional[Task]:
        idx = self._index.get(name)
        return None if idx is None else self._tasks[idx]

    def index_of(self, name: str) -> Optional[int]:
        return self._index.get(name)

    def names(self, indices: Sequence[int]) -> List[str]:
        return [self._tasks[i].name for i in indices]

    def reset_exec_counts(self) -> None:
        for task in self._tasks:
            task.exec_count = 0


__all__ = ["TaskGraph"]
