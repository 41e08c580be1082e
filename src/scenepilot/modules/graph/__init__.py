from .graph import TaskGraph
from .loader import GraphConfig, GraphConfigError
from .types import Options, Rect, TargetProfile, Task

__all__ = [
    "TaskGraph",
    "GraphConfig",
    "GraphConfigError",
    "Options",
    "Rect",
    "TargetProfile",
    "Task",
]
