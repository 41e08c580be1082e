from .adb import Adb, AdbError
from .protocols import CaptureFacade, ControlFacade, Target
from .target import AdbTarget, build_adb_target

__all__ = [
    "Adb",
    "AdbError",
    "AdbTarget",
    "build_adb_target",
    "CaptureFacade",
    "ControlFacade",
    "Target",
]
