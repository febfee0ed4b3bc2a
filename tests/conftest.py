# tests/conftest.py
"""
Shared fixtures: a scripted device bridge, a controllable clock and a small
login-screen hierarchy dump.
"""

from typing import Any, Dict, List, Optional

import pytest

from uiauto_android.adb import DeviceInfo
from uiauto_android.config import ResolverConfig
from uiauto_android.diaglogger import DiagnosticLogger

SAMPLE_XML = """<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="com.app" content-desc="" clickable="false" enabled="true" focusable="false" focused="false" scrollable="false" visible-to-user="true" bounds="[0,0][1080,1920]">
    <node index="0" text="" resource-id="com.app:id/login_form" class="android.widget.LinearLayout" package="com.app" content-desc="" clickable="false" enabled="true" focusable="false" focused="false" scrollable="false" visible-to-user="true" bounds="[0,200][1080,1200]">
      <node index="0" text="Username" resource-id="com.app:id/username" class="android.widget.EditText" package="com.app" content-desc="" clickable="true" enabled="true" focusable="true" focused="false" scrollable="false" visible-to-user="true" bounds="[40,300][1040,420]" />
      <node index="1" text="Log in" resource-id="com.app:id/btn_login" class="android.widget.Button" package="com.app" content-desc="" clickable="true" enabled="true" focusable="true" focused="false" scrollable="false" visible-to-user="true" bounds="[40,600][1040,720]" />
      <node index="2" text="Forgot password?" resource-id="" class="android.widget.TextView" package="com.app" content-desc="" clickable="false" enabled="true" focusable="false" focused="false" scrollable="false" visible-to-user="true" bounds="[300,800][780,860]" />
    </node>
    <node index="1" text="" resource-id="" class="android.widget.ImageButton" package="com.app" content-desc="Settings" clickable="true" enabled="true" focusable="true" focused="false" scrollable="false" visible-to-user="true" bounds="[960,40][1040,120]" />
  </node>
</hierarchy>"""

SAMPLE_NODE_COUNT = 6

BTN_LOGIN = (540, 660)
OFF_SCREEN = (2000, 2000)


class FakeBridge:
    """
    Scripted stand-in for AdbBridge.

    `hierarchies` is consumed one item per get_hierarchy() call; the last item
    repeats. Exception instances are raised instead of returned.
    """

    def __init__(
        self,
        hierarchies: Optional[List[Any]] = None,
        devices: Optional[List[DeviceInfo]] = None,
        png: Optional[bytes] = None,
    ):
        self.hierarchies = list(hierarchies if hierarchies is not None else [SAMPLE_XML])
        self.devices = list(devices if devices is not None else [DeviceInfo("emulator-5554", "device", "emulator")])
        self.png = png
        self.calls: List[tuple] = []
        self.tap_error: Optional[Exception] = None

    def get_hierarchy(self, device_id=None):
        self.calls.append(("get_hierarchy", device_id))
        item = self.hierarchies.pop(0) if len(self.hierarchies) > 1 else self.hierarchies[0]
        if isinstance(item, Exception):
            raise item
        return item

    def list_devices(self):
        self.calls.append(("list_devices",))
        return list(self.devices)

    def tap(self, x, y, device_id=None):
        self.calls.append(("tap", x, y, device_id))
        if self.tap_error is not None:
            raise self.tap_error

    def long_press(self, x, y, duration_ms=1000, device_id=None):
        self.calls.append(("long_press", x, y, duration_ms, device_id))

    def screencap(self, device_id=None):
        self.calls.append(("screencap", device_id))
        return self.png

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    def __init__(self, clock: Optional[FakeClock] = None):
        self.calls: List[float] = []
        self.clock = clock

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


def node(bounds: Optional[str] = None, children=None, **attrs: str) -> Dict[str, Any]:
    """Build a mapping-shaped node; `cls` is the class attribute and "_" stands for "-" (resource_id -> resource-id)."""
    bag = {("class" if k == "cls" else k.replace("_", "-")): v for k, v in attrs.items()}
    if bounds is not None:
        bag["bounds"] = bounds
    data: Dict[str, Any] = {"attrs": bag}
    if children is not None:
        data["children"] = children
    return data


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return ResolverConfig()


@pytest.fixture
def diag():
    return DiagnosticLogger()


@pytest.fixture(autouse=True)
def _reset_config():
    ResolverConfig.reset_to_defaults()
    yield
    ResolverConfig.reset_to_defaults()
