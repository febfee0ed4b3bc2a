# uiauto_android/inspector.py
"""
@file inspector.py
@brief Point inspection: the element under a coordinate plus scored locators.

Two modes:
  hover  - may reuse a cached snapshot; repeated calls for one device inside
           `inspect_throttle` return the previous result without touching the device
  tap    - always takes a fresh snapshot, never throttled

Each locator candidate is re-scored against the snapshot it came from:
+10 when it selects exactly one node, -10 when it selects five or more.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import ResolverConfig
from .exceptions import HierarchyParseError
from .hierarchy import HierarchyNode, count_nodes, parse_hierarchy_tree
from .locator import build_locator, build_locator_candidates, count_matches
from .matching import find_element_at, find_nearest_element
from .snapshot import SnapshotCache

log = logging.getLogger("uiauto_android.inspector")

INSPECT_MODES = ("hover", "tap")

UNIQUE_BONUS = 10
AMBIGUOUS_PENALTY = 10
AMBIGUOUS_MATCHES = 5


def _clamp(value: float, lo: int = 0, hi: int = 100) -> int:
    return int(max(lo, min(hi, value)))


def rescore_by_uniqueness(score: int, match_count: int) -> int:
    if match_count == 1:
        score += UNIQUE_BONUS
    elif match_count >= AMBIGUOUS_MATCHES:
        score -= AMBIGUOUS_PENALTY
    return _clamp(score)


def reliability_score(best_score: Optional[int], has_element: bool) -> int:
    return _clamp(round((best_score or 0) * 0.9 + (10 if has_element else 0)))


class Inspector:
    """
    Usage:
        inspector = Inspector(SnapshotCache(AdbBridge()))
        info = inspector.inspect_point(540, 1210, "emulator-5554", mode="tap")
        print(info["best"])
    """

    def __init__(
        self,
        cache: SnapshotCache,
        config: Optional[ResolverConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cache = cache
        self.config = config
        self.clock = clock
        self._last: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    def _config(self) -> ResolverConfig:
        return self.config or ResolverConfig.current()

    def inspect_point(self, x: float, y: float, device_id: str, mode: str = "hover") -> Dict[str, Any]:
        if mode not in INSPECT_MODES:
            raise ValueError(f"Unknown inspect mode: {mode!r} (expected one of {INSPECT_MODES})")
        cfg = self._config()

        if mode == "hover":
            last = self._last.get(device_id)
            if last is not None and self.clock() - last[0] < cfg.inspect_throttle:
                return last[1]

        result = self._inspect(x, y, device_id, mode, cfg)

        if mode == "hover":
            self._last[device_id] = (self.clock(), result)
        return result

    def _inspect(self, x: float, y: float, device_id: str, mode: str, cfg: ResolverConfig) -> Dict[str, Any]:
        snap = self.cache.fetch_snapshot(device_id, force_fresh=(mode == "tap"))
        result: Dict[str, Any] = {
            "x": x,
            "y": y,
            "device_id": device_id,
            "mode": mode,
            "element": None,
            "locator": "",
            "locators": [],
            "best": None,
            "reliability_score": 0,
            "node_count": 0,
            "from_cache": snap.from_cache,
        }
        if not snap.xml:
            log.warning("Inspect at (%s, %s): no hierarchy for %s", x, y, device_id)
            return result

        try:
            tree = parse_hierarchy_tree(snap.xml)
        except HierarchyParseError as e:
            log.warning("Inspect at (%s, %s): %s", x, y, e)
            return result

        root = HierarchyNode.from_element(tree)
        result["node_count"] = count_nodes(root)

        best = find_element_at(root, x, y, cfg.containment_tolerance)
        if best is None:
            best = find_nearest_element(root, x, y, cfg.proximity_radius)
        if best is None:
            return result

        candidates = build_locator_candidates(best.meta, parent_resource_id=best.parent_resource_id or None)
        for c in candidates:
            c.match_count = count_matches(tree, c.value)
            c.score = rescore_by_uniqueness(c.score, c.match_count)
        candidates.sort(key=lambda c: c.score, reverse=True)

        locators: List[Dict[str, Any]] = [c.to_dict() for c in candidates]
        top = locators[0] if locators else None

        result.update(
            element=best.meta.to_dict(),
            locator=build_locator(best.meta),
            locators=locators,
            best=top,
            reliability_score=reliability_score(top["score"] if top else None, True),
        )
        return result

    def reset_throttle(self, device_id: Optional[str] = None) -> None:
        if device_id is None:
            self._last.clear()
        else:
            self._last.pop(device_id, None)
