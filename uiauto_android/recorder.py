# uiauto_android/recorder.py
"""
Tap recording into scenario YAML steps.

Every tap is resolved to an element *before* it is sent to the device, since
the tap itself usually changes the screen. A tap that cannot be resolved is
still recorded with its coordinate locator ("x,y") rather than dropped.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

import yaml

from .adb import AdbBridge
from .device import DeviceSelector
from .exceptions import ActionError, DeviceError
from .resolver import ElementMatch, ElementResolver, coordinate_locator

log = logging.getLogger("uiauto_android.recorder")


def build_tap_step(
    x: float,
    y: float,
    match: Optional[ElementMatch],
    action: str = "tap",
) -> Dict[str, Any]:
    """
    Build one scenario step. The locator falls back to "x,y" when the tap
    was not resolved or the resolved node yields no locator.
    """
    locator = match.locator if match is not None and match.locator else ""
    step: Dict[str, Any] = {
        "x": int(round(x)),
        "y": int(round(y)),
    }
    if locator:
        step["locator"] = locator
        step["strategy"] = "xpath"
        step["element"] = match.metadata.to_dict()
    else:
        step["locator"] = coordinate_locator(x, y)
        step["strategy"] = "coordinates"
    return {action: step}


class Recorder:
    """
    Records taps on a device into semantic scenario steps.

    Usage:
        bridge = AdbBridge()
        recorder = Recorder(ElementResolver(SnapshotCache(bridge)), DeviceSelector(bridge), bridge)
        recorder.record_tap(540, 1210)
        recorder.save_scenario("scenarios/recorded.yaml")
    """

    def __init__(
        self,
        resolver: ElementResolver,
        selector: DeviceSelector,
        bridge: AdbBridge,
        scenario_out_path: Optional[str] = None,
    ):
        self.resolver = resolver
        self.selector = selector
        self.bridge = bridge
        self.scenario_out_path = scenario_out_path
        self.steps: List[Dict[str, Any]] = []

    def record_tap(self, x: float, y: float, device_id: Optional[str] = None) -> Dict[str, Any]:
        """Resolve, tap, and append the step. NoDeviceConnectedError propagates."""
        target = self.selector.select(device_id)
        match = self.resolver.resolve(x, y, target)
        try:
            self.bridge.tap(int(round(x)), int(round(y)), device_id=target)
        except DeviceError as e:
            raise ActionError("tap", device_id=target, details=f"({x}, {y})", cause=e) from e
        # the tap changed the screen
        self.resolver.cache.invalidate(target)
        return self._append(build_tap_step(x, y, match))

    def record_long_press(
        self,
        x: float,
        y: float,
        duration_ms: int = 1000,
        device_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        target = self.selector.select(device_id)
        match = self.resolver.resolve(x, y, target)
        try:
            self.bridge.long_press(int(round(x)), int(round(y)), duration_ms=duration_ms, device_id=target)
        except DeviceError as e:
            raise ActionError("long_press", device_id=target, details=f"({x}, {y})", cause=e) from e
        self.resolver.cache.invalidate(target)
        step = build_tap_step(x, y, match, action="long_press")
        step["long_press"]["duration_ms"] = int(duration_ms)
        return self._append(step)

    def _append(self, step: Dict[str, Any]) -> Dict[str, Any]:
        self.steps.append(step)
        action, body = next(iter(step.items()))
        log.info("Recorded %s: %s", action, body["locator"])
        return step

    def save_scenario(self, out_path: Optional[str] = None) -> str:
        """Save recorded steps to scenario YAML."""
        out_path = out_path or self.scenario_out_path
        if not out_path:
            raise ValueError("No scenario output path specified")

        out_path = os.path.abspath(out_path)
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

        scenario = {
            "recorded_at": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "steps": self.steps,
        }
        with open(out_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(scenario, f, sort_keys=False, allow_unicode=True)

        log.info("Scenario saved to: %s", out_path)
        return out_path
