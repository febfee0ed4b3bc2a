# uiauto_android/timings.py
"""
@file timings.py
@brief Resolver defaults and named presets.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


# Geometry, in device pixels.
MATCH_FIELDS: Dict[str, float] = {
    "containment_tolerance": 8.0,
    "proximity_radius": 28.0,
}

# Durations in seconds, plus attempt counts.
TIMING_FIELDS: Dict[str, Any] = {
    "snapshot_ttl": 1.5,
    "stale_factor": 2.0,
    "retry_count": 2,
    "retry_delay": 0.12,
    "inspect_throttle": 0.08,
}

DIAGNOSTIC_FIELDS: Dict[str, Any] = {
    "xml_snippet_chars": 200,
    "save_snapshots": False,
    "artifacts_dir": "artifacts",
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "snapshot_ttl": 1.0,
        "retry_delay": 0.05,
        "inspect_throttle": 0.05,
    },
    "slow": {
        "snapshot_ttl": 3.0,
        "retry_count": 3,
        "retry_delay": 0.3,
        "inspect_throttle": 0.15,
    },
    "ci": {
        "retry_count": 3,
        "retry_delay": 0.2,
        "save_snapshots": True,
    },
}


def all_fields() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    values.update(deepcopy(MATCH_FIELDS))
    values.update(deepcopy(TIMING_FIELDS))
    values.update(deepcopy(DIAGNOSTIC_FIELDS))
    return values


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def build_preset_values(preset: str) -> Dict[str, Any]:
    preset_key = (preset or "default").lower()
    values = all_fields()

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown resolver preset: {preset}")

    values.update(deepcopy(overrides))
    return values
