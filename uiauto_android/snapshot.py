# uiauto_android/snapshot.py
"""
Per-device hierarchy snapshot cache.

A live dump costs hundreds of milliseconds, so recent dumps are reused:

- age < snapshot_ttl and not force_fresh: served from cache
- otherwise a live fetch is attempted; a dump with a `<hierarchy` root replaces the slot
- a failed or unrecognizable fetch falls back to the cached dump while
  age < stale_window (snapshot_ttl * stale_factor), else no snapshot

Slots are replaced without locking; the last successful fetch wins.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import ResolverConfig
from .hierarchy import has_root_marker

log = logging.getLogger("uiauto_android.snapshot")


@dataclass(frozen=True)
class HierarchySnapshot:
    xml: str
    captured_at: float


@dataclass(frozen=True)
class SnapshotResult:
    xml: Optional[str]
    from_cache: bool = False


class SnapshotCache:
    """
    Usage:
        cache = SnapshotCache(AdbBridge())
        result = cache.fetch_snapshot("emulator-5554", force_fresh=True)
        if result.xml:
            ...
    """

    def __init__(
        self,
        bridge,
        config: Optional[ResolverConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.bridge = bridge
        self.config = config
        self.clock = clock
        self._snapshots: Dict[str, HierarchySnapshot] = {}

    def _config(self) -> ResolverConfig:
        return self.config or ResolverConfig.current()

    def get(self, device_id: str) -> Optional[HierarchySnapshot]:
        return self._snapshots.get(device_id)

    def age(self, device_id: str) -> Optional[float]:
        snap = self._snapshots.get(device_id)
        if snap is None:
            return None
        return self.clock() - snap.captured_at

    def fetch_snapshot(self, device_id: str, force_fresh: bool = False) -> SnapshotResult:
        cfg = self._config()
        cached = self._snapshots.get(device_id)

        if not force_fresh and cached is not None:
            if self.clock() - cached.captured_at < cfg.snapshot_ttl:
                return SnapshotResult(xml=cached.xml, from_cache=True)

        try:
            xml = self.bridge.get_hierarchy(device_id)
        except Exception as e:
            log.warning("Hierarchy fetch failed on %s: %s", device_id, e)
            xml = None

        if xml and has_root_marker(xml):
            self._snapshots[device_id] = HierarchySnapshot(xml=xml, captured_at=self.clock())
            return SnapshotResult(xml=xml, from_cache=False)

        if xml:
            log.warning("Hierarchy fetch on %s returned no <hierarchy> root (%d chars)", device_id, len(xml))

        cached = self._snapshots.get(device_id)
        if cached is not None and self.clock() - cached.captured_at < cfg.stale_window:
            log.warning("Serving stale snapshot for %s", device_id)
            return SnapshotResult(xml=cached.xml, from_cache=True)

        return SnapshotResult(xml=None, from_cache=False)

    def invalidate(self, device_id: Optional[str] = None) -> None:
        if device_id is None:
            self._snapshots.clear()
        else:
            self._snapshots.pop(device_id, None)
