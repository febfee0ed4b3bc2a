# uiauto_android/exceptions.py
from __future__ import annotations
from typing import List, Optional


class UIAutoError(Exception):
    """Base exception for the framework."""


class ConfigError(UIAutoError):
    """Raised when YAML/JSON configuration is invalid."""


class HierarchyParseError(UIAutoError):
    """Raised when a hierarchy dump cannot be parsed into a tree."""


class NoDeviceConnectedError(UIAutoError):
    """Raised by device selection when no Android device is attached."""

    def __init__(self, message: str = "No device connected"):
        super().__init__(message)


class DeviceError(UIAutoError):
    def __init__(
        self,
        message: str,
        args: Optional[List[str]] = None,
        device_id: Optional[str] = None,
        returncode: Optional[int] = None,
    ):
        self.message = message
        self.adb_args = list(args or [])
        self.device_id = device_id
        self.returncode = returncode
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"DeviceError: {self.message}"
        if self.adb_args:
            base += f" command='{' '.join(self.adb_args)}'"
        if self.device_id:
            base += f" device='{self.device_id}'"
        if self.returncode is not None:
            base += f" code={self.returncode}"
        return base


class ActionError(UIAutoError):
    def __init__(
        self,
        action: str,
        device_id: Optional[str] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.action = action
        self.device_id = device_id
        self.details = details
        self.cause = cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"ActionError: action='{self.action}'"
        if self.device_id:
            base += f" device='{self.device_id}'"
        if self.details:
            base += f" details='{self.details}'"
        if self.cause:
            base += f" cause='{type(self.cause).__name__}: {self.cause}'"
        return base
