# tests/test_inspector.py
"""
Tests for point inspection.
"""

import pytest

from conftest import BTN_LOGIN, OFF_SCREEN, SAMPLE_NODE_COUNT, SAMPLE_XML, FakeBridge, FakeClock

from uiauto_android.config import ResolverConfig
from uiauto_android.inspector import (Inspector, reliability_score,
                                      rescore_by_uniqueness)
from uiauto_android.snapshot import SnapshotCache

DEVICE = "emulator-5554"


def make_inspector(hierarchies=None):
    clock = FakeClock()
    bridge = FakeBridge(hierarchies=hierarchies)
    config = ResolverConfig()
    inspector = Inspector(SnapshotCache(bridge, config=config, clock=clock), config=config, clock=clock)
    return inspector, bridge, clock


class TestInspectPoint:
    """Tests for Inspector.inspect_point."""

    def test_tap_mode_fetches_fresh(self):
        """Tap mode always takes a fresh snapshot."""
        inspector, bridge, _ = make_inspector()
        info = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        assert info["from_cache"] is False
        assert bridge.count("get_hierarchy") == 2

    def test_element_and_locators(self):
        """The result holds the element and its scored locators."""
        inspector, _, _ = make_inspector()
        info = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        assert info["element"]["resource_id"] == "com.app:id/btn_login"
        assert info["locator"] == '//*[@class="android.widget.Button" and @resource-id="com.app:id/btn_login"]'
        assert info["node_count"] == SAMPLE_NODE_COUNT
        assert info["best"]["value"] == info["locator"]
        assert info["best"]["score"] == 95
        assert info["best"]["match_count"] == 1
        scores = [c["score"] for c in info["locators"]]
        assert scores == sorted(scores, reverse=True)
        assert info["reliability_score"] == reliability_score(95, True)

    def test_parent_anchor_candidate(self):
        """A parent resource-id yields an anchored candidate."""
        inspector, _, _ = make_inspector()
        info = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        anchored = [c for c in info["locators"] if c["reason"] == "parent anchor"]
        assert anchored[0]["value"].startswith('//*[@resource-id="com.app:id/login_form"]//')
        assert anchored[0]["match_count"] == 1

    def test_hover_uses_cache(self):
        """Hover mode may reuse a cached snapshot."""
        inspector, bridge, clock = make_inspector()
        inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        clock.advance(0.5)
        info = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="hover")
        assert info["from_cache"] is True
        assert bridge.count("get_hierarchy") == 1

    def test_hover_is_throttled(self):
        """Hover calls inside the throttle window return the previous result."""
        inspector, bridge, clock = make_inspector()
        first = inspector.inspect_point(*BTN_LOGIN, DEVICE)
        clock.advance(0.05)
        assert inspector.inspect_point(100, 100, DEVICE) is first
        clock.advance(0.05)
        second = inspector.inspect_point(100, 100, DEVICE)
        assert second is not first
        assert second["x"] == 100

    def test_tap_is_never_throttled(self):
        """Tap calls are never throttled."""
        inspector, _, _ = make_inspector()
        first = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="hover")
        assert inspector.inspect_point(100, 100, DEVICE, mode="tap") is not first

    def test_no_hierarchy(self):
        """A missing hierarchy yields an empty result."""
        inspector, _, _ = make_inspector([None])
        info = inspector.inspect_point(*BTN_LOGIN, DEVICE, mode="tap")
        assert info["element"] is None
        assert info["locators"] == []
        assert info["reliability_score"] == 0

    def test_no_element(self):
        """A point with no element yields an empty result."""
        inspector, _, _ = make_inspector()
        info = inspector.inspect_point(*OFF_SCREEN, DEVICE, mode="tap")
        assert info["element"] is None
        assert info["node_count"] == SAMPLE_NODE_COUNT

    def test_unknown_mode(self):
        """An unknown mode raises ValueError."""
        inspector, _, _ = make_inspector()
        with pytest.raises(ValueError):
            inspector.inspect_point(1, 1, DEVICE, mode="drag")


class TestScoring:
    """Tests for uniqueness re-scoring."""

    @pytest.mark.parametrize("score,count,expected", [
        (85, 1, 95),
        (85, 2, 85),
        (85, 4, 85),
        (85, 5, 75),
        (95, 1, 100),
        (5, 9, 0),
        (60, 0, 60),
    ])
    def test_rescore(self, score, count, expected):
        """Unique locators gain and ambiguous ones lose score."""
        assert rescore_by_uniqueness(score, count) == expected

    def test_reliability(self):
        """Reliability is 0.9 of the best score plus 10 for an element, clamped to 0..100."""
        assert reliability_score(None, False) == 0
        assert reliability_score(100, True) == 100
        assert reliability_score(50, True) == 55
