# uiauto_android/__init__.py
"""
UIAuto Android - resolves screen coordinates on an Android device to the
accessibility node under them, and synthesizes a stable locator for it.

This package provides:
- SnapshotCache: per-device hierarchy dumps with freshness and stale fallback
- ElementResolver: two-attempt coordinate resolution that never raises
- Inspector: point inspection with scored locator candidates
- Recorder: tap capture into scenario YAML with a coordinate fallback
- AdbBridge / DeviceSelector: device access over adb
"""

from uiauto_android.adb import AdbBridge, DeviceInfo
from uiauto_android.bounds import BoundsRect, parse_bounds
from uiauto_android.config import ResolverConfig
from uiauto_android.device import DeviceSelector
from uiauto_android.diaglogger import DIAG_LOGGER, DiagnosticLogger
from uiauto_android.exceptions import (
    UIAutoError,
    ConfigError,
    DeviceError,
    NoDeviceConnectedError,
    HierarchyParseError,
    ActionError,
)
from uiauto_android.hierarchy import HierarchyNode, parse_hierarchy
from uiauto_android.inspector import Inspector
from uiauto_android.locator import build_locator, build_locator_candidates, xpath_literal
from uiauto_android.matching import find_element_at, find_nearest_element
from uiauto_android.node_meta import NodeMeta, extract_node_meta
from uiauto_android.recorder import Recorder, build_tap_step
from uiauto_android.resolver import ElementMatch, ElementResolver, coordinate_locator
from uiauto_android.snapshot import SnapshotCache, SnapshotResult

__all__ = [
    "AdbBridge",
    "DeviceInfo",
    "BoundsRect",
    "parse_bounds",
    "ResolverConfig",
    "DeviceSelector",
    "DIAG_LOGGER",
    "DiagnosticLogger",
    "UIAutoError",
    "ConfigError",
    "DeviceError",
    "NoDeviceConnectedError",
    "HierarchyParseError",
    "ActionError",
    "HierarchyNode",
    "parse_hierarchy",
    "Inspector",
    "build_locator",
    "build_locator_candidates",
    "xpath_literal",
    "find_element_at",
    "find_nearest_element",
    "NodeMeta",
    "extract_node_meta",
    "Recorder",
    "build_tap_step",
    "ElementMatch",
    "ElementResolver",
    "coordinate_locator",
    "SnapshotCache",
    "SnapshotResult",
]

__version__ = "1.0.0"
