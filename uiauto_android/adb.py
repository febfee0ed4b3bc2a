# uiauto_android/adb.py
"""
@file adb.py
@brief Thin Android Debug Bridge client used as the device-bridge collaborator.

Only the commands the resolution engine and tap capture need are wrapped.
Every command runs through `run()`, which owns the subprocess timeout and
turns failures into DeviceError.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import DeviceError
from .hierarchy import has_root_marker, sanitize_hierarchy_xml

log = logging.getLogger("uiauto_android.adb")

DEFAULT_DUMP_PATH = "/sdcard/window_dump.xml"

_PRIORITY = {"usb": 1, "wireless": 2, "emulator": 3}


@dataclass(frozen=True)
class DeviceInfo:
    id: str
    status: str
    type: str

    @property
    def priority(self) -> int:
        return _PRIORITY.get(self.type, 9)


def classify_device(device_id: str) -> str:
    if device_id.startswith("emulator-"):
        return "emulator"
    if ":" in device_id:
        return "wireless"
    return "usb"


def parse_devices_output(stdout: str) -> List[DeviceInfo]:
    """Parse `adb devices` output; only devices in state `device` are kept, USB first."""
    devices: List[DeviceInfo] = []
    for line in stdout.splitlines()[1:]:
        line = line.strip()
        if not line or "\t" not in line:
            continue
        device_id, status = line.split("\t", 1)
        if status.strip() != "device":
            continue
        devices.append(DeviceInfo(id=device_id, status="device", type=classify_device(device_id)))
    devices.sort(key=lambda d: d.priority)
    return devices


class AdbBridge:
    """
    Runs adb commands against a device.

    Usage:
        bridge = AdbBridge()
        xml = bridge.get_hierarchy("emulator-5554")
    """

    def __init__(self, adb_path: str = "adb", command_timeout: float = 15.0):
        self.adb_path = adb_path
        self.command_timeout = command_timeout

    def _run_raw(
        self,
        args: List[str],
        device_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        full = [self.adb_path]
        if device_id:
            full += ["-s", device_id]
        full += list(args)
        try:
            proc = subprocess.run(
                full,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout or self.command_timeout,
            )
        except FileNotFoundError as e:
            raise DeviceError(f"adb executable not found: {self.adb_path}", args, device_id) from e
        except subprocess.TimeoutExpired as e:
            raise DeviceError(f"timed out after {e.timeout}s", args, device_id) from e
        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout or b"").decode("utf-8", "replace").strip()
            raise DeviceError(message or "command failed", args, device_id, proc.returncode)
        return proc

    def run(
        self,
        args: List[str],
        device_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Run an adb command and return decoded stdout. Raises DeviceError."""
        proc = self._run_raw(args, device_id=device_id, timeout=timeout)
        return proc.stdout.decode("utf-8", "replace")

    # =========================================================
    # Devices
    # =========================================================

    def is_available(self) -> bool:
        try:
            self.run(["version"], timeout=5.0)
            return True
        except DeviceError:
            return False

    def list_devices(self) -> List[DeviceInfo]:
        return parse_devices_output(self.run(["devices"], timeout=5.0))

    # =========================================================
    # Hierarchy
    # =========================================================

    def get_hierarchy(self, device_id: Optional[str] = None) -> Optional[str]:
        """
        Dump the current accessibility tree.

        Tries `exec-out` to /dev/tty first (no sdcard round trip), then the
        compressed variant, then a classic dump to sdcard read back with `cat`.
        Returns None if no attempt produced a `<hierarchy>` document.
        """
        for args in (
            ["exec-out", "uiautomator", "dump", "/dev/tty"],
            ["exec-out", "uiautomator", "dump", "--compressed", "/dev/tty"],
        ):
            try:
                xml = sanitize_hierarchy_xml(self.run(args, device_id=device_id))
            except DeviceError as e:
                log.debug("hierarchy dump attempt failed: %s", e)
                continue
            if has_root_marker(xml):
                return xml

        try:
            self.run(["shell", "uiautomator", "dump", DEFAULT_DUMP_PATH], device_id=device_id)
            xml = sanitize_hierarchy_xml(self.run(["shell", "cat", DEFAULT_DUMP_PATH], device_id=device_id))
        except DeviceError as e:
            log.warning("uiautomator dump failed on %s: %s", device_id, e)
            return None
        return xml if has_root_marker(xml) else None

    # =========================================================
    # Input
    # =========================================================

    def tap(self, x: int, y: int, device_id: Optional[str] = None) -> None:
        self.run(["shell", "input", "tap", str(int(x)), str(int(y))], device_id=device_id, timeout=5.0)

    def long_press(self, x: int, y: int, duration_ms: int = 1000, device_id: Optional[str] = None) -> None:
        """Long press as a zero-length swipe held for `duration_ms`."""
        px, py = str(int(x)), str(int(y))
        self.run(
            ["shell", "input", "swipe", px, py, px, py, str(int(duration_ms))],
            device_id=device_id,
            timeout=5.0 + duration_ms / 1000.0,
        )

    def screencap(self, device_id: Optional[str] = None) -> bytes:
        """PNG bytes of the current screen."""
        return self._run_raw(["exec-out", "screencap", "-p"], device_id=device_id).stdout
