"""
ADB 目标设备：同时提供截图与点击能力
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ...core.config import settings
from ...core.logger import logger
from ..graph.types import Options, Rect, TargetProfile
from ..vision.utils import load_image
from .adb import Adb, AdbError


class AdbTarget:
    def __init__(self, profile: TargetProfile, adb: Adb, width: int, height: int) -> None:
        self.profile = profile
        self.name = profile.name
        self.adb = adb
        self.width = width
        self.height = height
        self.logger = logger.bind(module="AdbTarget", device=profile.adb_addr)

    @property
    def addr(self) -> str:
        return self.profile.adb_addr

    def is_bound(self) -> bool:
        try:
            if not self.adb.connect(self.addr):
                return False
            return self.adb.get_state(self.addr) == "device"
        except AdbError as e:
            self.logger.warning(f"连接设备失败: {e}")
            return False

    def get_frame(self) -> Optional[np.ndarray]:
        try:
            data = self.adb.screencap(self.addr)
            if not data:
                return None
            return load_image(data)
        except (AdbError, ValueError) as e:
            self.logger.error(f"截图失败: {e}")
            return None

    def get_window_bounds(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def get_target_offsets(self) -> Tuple[int, int]:
        return (self.profile.x_offset, self.profile.y_offset)

    def click(self, rect: Rect) -> None:
        x, y = rect.random_point()
        try:
            self.adb.tap(self.addr, x, y)
            self.logger.debug(f"点击: ({x}, {y})")
        except AdbError as e:
            self.logger.error(f"点击失败: ({x}, {y}), 错误: {e}")

    def restore_window(self) -> bool:
        """唤醒屏幕"""
        try:
            self.adb.keyevent(self.addr, "KEYCODE_WAKEUP")
            return True
        except AdbError as e:
            self.logger.warning(f"唤醒失败: {e}")
            return False

    def resize_window(self) -> bool:
        """保证显示分辨率与任务模板一致"""
        try:
            size = self.adb.wm_size(self.addr)
            if size == (self.width, self.height):
                return True
            self.logger.info(f"分辨率 {size} 与预期 {self.width}x{self.height} 不一致，尝试修改")
            self.adb.set_wm_size(self.addr, self.width, self.height)
            return self.adb.wm_size(self.addr) == (self.width, self.height)
        except AdbError as e:
            self.logger.warning(f"设置分辨率失败: {e}")
            return False


def build_adb_target(profile: TargetProfile, options: Options) -> AdbTarget:
    """按全局配置创建 ADB 目标"""
    adb = Adb(settings.adb_path, timeout=settings.adb_timeout)
    return AdbTarget(profile, adb, options.window_width, options.window_height)


__all__ = ["AdbTarget", "build_adb_target"]
