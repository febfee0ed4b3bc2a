# uiauto_android/device.py
from __future__ import annotations

import logging
from typing import List, Optional

from .adb import AdbBridge, DeviceInfo
from .exceptions import NoDeviceConnectedError

log = logging.getLogger("uiauto_android.device")


class DeviceSelector:
    """
    Picks the device a call should run against.

    A requested id wins if it is connected; otherwise the primary device (USB
    before wireless before emulator) is used. No device at all raises
    NoDeviceConnectedError, which callers are expected to let propagate.
    """

    def __init__(self, bridge: AdbBridge):
        self.bridge = bridge
        self.devices: List[DeviceInfo] = []

    def refresh(self) -> List[DeviceInfo]:
        self.devices = self.bridge.list_devices()
        return self.devices

    @property
    def primary(self) -> Optional[DeviceInfo]:
        return self.devices[0] if self.devices else None

    def select(self, device_id: Optional[str] = None) -> str:
        self.refresh()

        if device_id and any(d.id == device_id for d in self.devices):
            return device_id

        primary = self.primary
        if primary is None:
            raise NoDeviceConnectedError()

        if device_id and device_id != primary.id:
            log.warning("Requested device '%s' not found. Falling back to '%s'.", device_id, primary.id)
        return primary.id
