# tests/test_snapshot.py
"""
Tests for the per-device snapshot cache.
"""

import logging

from conftest import SAMPLE_XML, FakeBridge, FakeClock

from uiauto_android.config import ResolverConfig
from uiauto_android.exceptions import DeviceError
from uiauto_android.snapshot import SnapshotCache

DEVICE = "emulator-5554"


def make_cache(hierarchies, clock=None, **config):
    bridge = FakeBridge(hierarchies=hierarchies)
    clock = clock or FakeClock()
    cache = SnapshotCache(bridge, config=ResolverConfig().with_overrides(**config), clock=clock)
    return cache, bridge, clock


class TestFreshness:
    """Snapshots younger than the TTL are served without a refetch."""

    def test_first_fetch_is_live(self):
        """The first fetch goes to the device."""
        cache, bridge, _ = make_cache([SAMPLE_XML])
        result = cache.fetch_snapshot(DEVICE)
        assert result.xml == SAMPLE_XML
        assert result.from_cache is False
        assert bridge.count("get_hierarchy") == 1

    def test_served_from_cache_inside_ttl(self):
        """A snapshot younger than the TTL is served from cache."""
        cache, bridge, clock = make_cache([SAMPLE_XML])
        cache.fetch_snapshot(DEVICE)
        clock.advance(1.499)
        result = cache.fetch_snapshot(DEVICE)
        assert result.from_cache is True
        assert result.xml == SAMPLE_XML
        assert bridge.count("get_hierarchy") == 1

    def test_refetched_at_ttl(self):
        """A snapshot at the TTL is refetched."""
        cache, bridge, clock = make_cache([SAMPLE_XML])
        cache.fetch_snapshot(DEVICE)
        clock.advance(1.5)
        assert cache.fetch_snapshot(DEVICE).from_cache is False
        assert bridge.count("get_hierarchy") == 2

    def test_force_fresh_bypasses_cache(self):
        """force_fresh always fetches from the device."""
        cache, bridge, _ = make_cache([SAMPLE_XML])
        cache.fetch_snapshot(DEVICE)
        assert cache.fetch_snapshot(DEVICE, force_fresh=True).from_cache is False
        assert bridge.count("get_hierarchy") == 2

    def test_devices_are_cached_separately(self):
        """Each device has its own snapshot."""
        cache, bridge, _ = make_cache([SAMPLE_XML])
        cache.fetch_snapshot("a")
        cache.fetch_snapshot("b")
        assert bridge.count("get_hierarchy") == 2


class TestStaleFallback:
    """A failed live fetch may fall back to a stale snapshot up to twice the TTL."""

    def test_stale_served_when_fetch_fails(self):
        """A failed fetch serves the stale snapshot."""
        cache, _, clock = make_cache([SAMPLE_XML, None])
        cache.fetch_snapshot(DEVICE)
        clock.advance(2.0)
        result = cache.fetch_snapshot(DEVICE)
        assert result.xml == SAMPLE_XML
        assert result.from_cache is True

    def test_stale_fallback_logs_warning(self, caplog):
        """Serving a stale snapshot logs a warning."""
        caplog.set_level(logging.WARNING, logger="uiauto_android.snapshot")
        cache, _, clock = make_cache([SAMPLE_XML, None])
        cache.fetch_snapshot(DEVICE)
        clock.advance(2.0)
        cache.fetch_snapshot(DEVICE)
        assert any(
            r.levelno == logging.WARNING and "Serving stale snapshot for emulator-5554" in r.getMessage()
            for r in caplog.records
        )

    def test_stale_served_when_payload_unrecognized(self):
        """A payload without a hierarchy serves the stale snapshot."""
        cache, _, clock = make_cache([SAMPLE_XML, "ERROR: could not get idle state."])
        cache.fetch_snapshot(DEVICE)
        clock.advance(2.999)
        assert cache.fetch_snapshot(DEVICE).xml == SAMPLE_XML

    def test_stale_served_when_bridge_raises(self):
        """A bridge exception serves the stale snapshot."""
        cache, _, clock = make_cache([SAMPLE_XML, DeviceError("device offline")])
        cache.fetch_snapshot(DEVICE)
        clock.advance(0.5)
        result = cache.fetch_snapshot(DEVICE, force_fresh=True)
        assert result.xml == SAMPLE_XML
        assert result.from_cache is True

    def test_nothing_after_stale_window(self):
        """Nothing is served past the stale window."""
        cache, _, clock = make_cache([SAMPLE_XML, None])
        cache.fetch_snapshot(DEVICE)
        clock.advance(3.0)
        result = cache.fetch_snapshot(DEVICE)
        assert result.xml is None
        assert result.from_cache is False

    def test_nothing_without_any_snapshot(self):
        """A failed first fetch serves nothing."""
        cache, _, _ = make_cache([""])
        assert cache.fetch_snapshot(DEVICE).xml is None

    def test_failed_fetch_does_not_replace_snapshot(self):
        """A failed fetch keeps the previous snapshot."""
        cache, _, clock = make_cache([SAMPLE_XML, None])
        cache.fetch_snapshot(DEVICE)
        captured = cache.get(DEVICE).captured_at
        clock.advance(2.0)
        cache.fetch_snapshot(DEVICE)
        assert cache.get(DEVICE).captured_at == captured
        assert cache.age(DEVICE) == 2.0

    def test_windows_follow_config(self):
        """TTL and stale window follow the config."""
        cache, _, clock = make_cache([SAMPLE_XML, None], snapshot_ttl=1.0, stale_factor=3.0)
        cache.fetch_snapshot(DEVICE)
        clock.advance(2.5)
        assert cache.fetch_snapshot(DEVICE).xml == SAMPLE_XML


class TestInvalidate:
    """Tests for SnapshotCache.invalidate."""

    def test_single_device(self):
        """invalidate(device) drops only that device."""
        cache, _, _ = make_cache([SAMPLE_XML])
        cache.fetch_snapshot("a")
        cache.fetch_snapshot("b")
        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") is not None

    def test_all_devices(self):
        """invalidate() drops every device."""
        cache, _, _ = make_cache([SAMPLE_XML])
        cache.fetch_snapshot("a")
        cache.invalidate()
        assert cache.get("a") is None
        assert cache.age("a") is None
