from .assistant import Assistant, accepts, build_assistant
from .session import RunSession
from .snapshot import export_frame, timestamped_path

__all__ = [
    "Assistant",
    "accepts",
    "build_assistant",
    "RunSession",
    "export_frame",
    "timestamped_path",
]
