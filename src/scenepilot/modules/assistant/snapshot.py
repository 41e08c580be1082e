"""
窗口截图导出
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

import cv2  # type: ignore

from ...core.constants import SNAPSHOT_BORDER_INSET
from ...core.logger import logger
from ..emu.protocols import CaptureFacade
from ..vision.utils import crop, is_empty

_log = logger.bind(module="Snapshot")


def timestamped_path(directory: str, now: datetime | None = None) -> Path:
    """<cwd>/<directory>/<YYYY-MM-DD_HH-MM-SS-mmm>.png，目录在导出成功前不会创建"""
    now = now or datetime.now()
    dirname = Path.cwd() / directory
    stamp = now.strftime("%Y-%m-%d_%H-%M-%S") + f"-{now.microsecond // 1000:03d}"
    return dirname / f"{stamp}.png"


def export_frame(capture: CaptureFacade, path: str | Path, width: int, height: int) -> bool:
    """截取当前画面，裁掉模拟器边框后写入 path

    画面小于 width x height、裁剪越界或写文件失败都返回 False。
    """
    frame = capture.get_frame()
    if is_empty(frame) or frame.shape[1] < width or frame.shape[0] < height:
        _log.error("截图尺寸异常，放弃导出")
        return False

    # 裁掉边框一圈，识别服务不认带边框的图
    x_offset, y_offset = capture.get_target_offsets()
    x = -x_offset + SNAPSHOT_BORDER_INSET
    y = -y_offset
    try:
        region = crop(frame, x, y, width - SNAPSHOT_BORDER_INSET, height - SNAPSHOT_BORDER_INSET)
    except ValueError as e:
        _log.error(f"裁剪失败: {e}")
        return False

    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        ok = bool(cv2.imwrite(str(path), region))
    except (cv2.error, OSError) as e:
        _log.error(f"截图写入失败: {path}, 错误: {e}")
        return False

    if ok:
        _log.info(f"截图已保存: {path}")
    else:
        _log.error(f"截图写入失败: {path}")
    return ok


__all__ = ["timestamped_path", "export_frame"]
