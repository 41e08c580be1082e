"""
ADB 适配封装

提供目标设备的基础操作：
- connect(addr)
- get_state(addr)
- screencap(addr) -> PNG bytes
- tap(addr, x, y)
- keyevent(addr, key)
- wm_size(addr) / set_wm_size(addr, w, h)
"""
from __future__ import annotations

import re
import subprocess
from typing import List, Optional, Tuple


class AdbError(RuntimeError):
    pass


_WM_SIZE_RE = re.compile(r"(Override|Physical) size:\s*(\d+)x(\d+)")


class Adb:
    def __init__(self, adb_path: str = "adb", timeout: float = 10.0) -> None:
        self.adb = adb_path
        self.timeout = timeout

    def _run(self, args: List[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        try:
            cp = subprocess.run(
                [self.adb, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout or self.timeout,
            )
        except FileNotFoundError as e:
            raise AdbError(f"找不到 ADB 可执行文件: {self.adb}") from e
        except subprocess.TimeoutExpired as e:
            raise AdbError(f"ADB 命令超时: {' '.join(args)}") from e
        return cp

    def connect(self, addr: str) -> bool:
        # 本地 USB 序列号无需 connect
        if ":" not in addr:
            return True
        cp = self._run(["connect", addr])
        out = (cp.stdout or b"").decode(errors="ignore").lower()
        return cp.returncode == 0 and ("connected" in out or "already" in out) and "cannot" not in out

    def get_state(self, addr: str) -> str:
        cp = self._run(["-s", addr, "get-state"])
        if cp.returncode != 0:
            return ""
        return (cp.stdout or b"").decode(errors="ignore").strip()

    def screencap(self, addr: str) -> bytes:
        cp = self._run(["-s", addr, "exec-out", "screencap", "-p"])
        if cp.returncode != 0:
            raise AdbError((cp.stderr or b"").decode(errors="ignore") or "ADB 截图失败")
        return cp.stdout or b""

    def tap(self, addr: str, x: int, y: int) -> None:
        cp = self._run(["-s", addr, "shell", "input", "tap", str(x), str(y)])
        if cp.returncode != 0:
            raise AdbError((cp.stderr or b"").decode(errors="ignore"))

    def keyevent(self, addr: str, key: str) -> None:
        cp = self._run(["-s", addr, "shell", "input", "keyevent", key])
        if cp.returncode != 0:
            raise AdbError((cp.stderr or b"").decode(errors="ignore"))

    def wm_size(self, addr: str) -> Optional[Tuple[int, int]]:
        """当前显示分辨率，Override 优先于 Physical"""
        cp = self._run(["-s", addr, "shell", "wm", "size"])
        out = (cp.stdout or b"").decode(errors="ignore")
        sizes = {kind: (int(w), int(h)) for kind, w, h in _WM_SIZE_RE.findall(out)}
        return sizes.get("Override") or sizes.get("Physical")

    def set_wm_size(self, addr: str, width: int, height: int) -> None:
        cp = self._run(["-s", addr, "shell", "wm", "size", f"{width}x{height}"])
        if cp.returncode != 0:
            raise AdbError((cp.stderr or b"").decode(errors="ignore"))
