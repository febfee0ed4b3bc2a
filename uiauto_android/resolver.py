# uiauto_android/resolver.py
"""
@file resolver.py
@brief Resolves a tap coordinate to the accessibility node under it.

Each attempt takes a fresh snapshot, runs containment matching and falls back
to proximity matching. The first attempt is labeled "fresh" and every later
one "retry"; between attempts the resolver sleeps `retry_delay` so the UI can
settle.

`resolve()` never raises for device or parsing problems: they degrade to None
with a warning and a diagnostic record. Device selection happens before this
layer, so NoDeviceConnectedError is never produced here.
"""

from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .artifacts import make_artifacts
from .config import ResolverConfig
from .diaglogger import DIAG_LOGGER, DiagnosticLogger
from .exceptions import HierarchyParseError
from .hierarchy import count_nodes, parse_hierarchy
from .locator import build_locator
from .matching import find_element_at, find_nearest_element
from .node_meta import NodeMeta
from .snapshot import SnapshotCache

log = logging.getLogger("uiauto_android.resolver")

FIRST_ATTEMPT = "fresh"
RETRY_ATTEMPT = "retry"


@dataclass(frozen=True)
class ElementMatch:
    metadata: NodeMeta
    locator: str
    strategy: str = "containment"
    attempt: str = "fresh"
    from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "locator": self.locator,
            "strategy": self.strategy,
            "attempt": self.attempt,
            "from_cache": self.from_cache,
        }


def attempt_label(index: int) -> str:
    return FIRST_ATTEMPT if index == 0 else RETRY_ATTEMPT


def coordinate_locator(x: float, y: float) -> str:
    """Locator used by recorded steps when no element could be resolved."""
    return f"{int(round(x))},{int(round(y))}"


class ElementResolver:
    """
    Usage:
        resolver = ElementResolver(SnapshotCache(AdbBridge()))
        match = resolver.resolve(540, 1210, "emulator-5554")
        locator = match.locator if match else coordinate_locator(540, 1210)
    """

    def __init__(
        self,
        cache: SnapshotCache,
        config: Optional[ResolverConfig] = None,
        diag_logger: DiagnosticLogger = DIAG_LOGGER,
        sleep: Callable[[float], None] = time.sleep,
        capture_func: Optional[Callable[[str], Optional[bytes]]] = None,
    ):
        """
        @param cache Snapshot cache wrapping the device bridge
        @param config Fixed configuration (uses ResolverConfig.current() if None)
        @param diag_logger Sink for no-match diagnostic records
        @param sleep Delay function used between attempts
        @param capture_func Optional screenshot source for debug artifacts, called with the device id
        """
        self.cache = cache
        self.config = config
        self.diag = diag_logger
        self.sleep = sleep
        self.capture_func = capture_func

    def _config(self) -> ResolverConfig:
        return self.config or ResolverConfig.current()

    def resolve(self, x: float, y: float, device_id: str) -> Optional[ElementMatch]:
        cfg = self._config()
        for index in range(max(1, cfg.retry_count)):
            label = attempt_label(index)
            if index > 0:
                self.sleep(cfg.retry_delay)
            try:
                match = self._attempt(x, y, device_id, label, cfg)
            except Exception as e:
                log.warning("Resolve attempt '%s' at (%s, %s) on %s failed: %s", label, x, y, device_id, e)
                match = None
            if match is not None:
                return match
        log.warning("No element resolved at (%s, %s) on %s", x, y, device_id)
        return None

    def _attempt(
        self,
        x: float,
        y: float,
        device_id: str,
        label: str,
        cfg: ResolverConfig,
    ) -> Optional[ElementMatch]:
        snap = self.cache.fetch_snapshot(device_id, force_fresh=True)
        if not snap.xml:
            self._report_no_match(x, y, device_id, label, None, 0, snap.from_cache, cfg)
            return None

        try:
            root = parse_hierarchy(snap.xml)
        except HierarchyParseError as e:
            log.warning("Hierarchy parse failed for %s (attempt '%s'): %s", device_id, label, e)
            self._report_no_match(x, y, device_id, label, snap.xml, 0, snap.from_cache, cfg)
            return None

        strategy = "containment"
        best = find_element_at(root, x, y, cfg.containment_tolerance)
        if best is None:
            strategy = "proximity"
            best = find_nearest_element(root, x, y, cfg.proximity_radius)

        if best is None:
            self._report_no_match(x, y, device_id, label, snap.xml, count_nodes(root), snap.from_cache, cfg)
            return None

        log.debug("Resolved (%s, %s) by %s on attempt '%s': %s", x, y, strategy, label, best.meta.class_name)
        return ElementMatch(
            metadata=best.meta,
            locator=build_locator(best.meta),
            strategy=strategy,
            attempt=label,
            from_cache=snap.from_cache,
        )

    def _report_no_match(
        self,
        x: float,
        y: float,
        device_id: str,
        label: str,
        xml: Optional[str],
        node_count: int,
        from_cache: bool,
        cfg: ResolverConfig,
    ) -> None:
        """
        Warn with the full diagnostic record, mirror it to the diagnostic
        logger, and save artifacts when `save_snapshots` is set.
        """
        snippet = xml[:cfg.xml_snippet_chars] if xml and cfg.xml_snippet_chars else None
        record = {
            "device_id": device_id,
            "x": x,
            "y": y,
            "node_count": node_count,
            "from_cache": from_cache,
            "label": label,
            "xml_snippet": snippet,
        }
        log.warning("No element match for point: %s", record)
        self.diag.log_no_match(**record)

        if not xml or not cfg.save_snapshots:
            return

        capture = None
        if self.capture_func is not None:
            capture = functools.partial(self.capture_func, device_id)
        prefix = f"no_match_{device_id.replace(':', '_')}_{label}"
        artifacts = make_artifacts(xml, cfg.artifacts_dir, prefix, capture_func=capture)
        if artifacts:
            log.info("Saved no-match artifacts: %s", artifacts)
