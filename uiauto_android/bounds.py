# uiauto_android/bounds.py
"""
@file bounds.py
@brief Parsing and geometry helpers for uiautomator `bounds` attributes.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

_BOUNDS_RE = re.compile(r"\[(\d+),(\d+)\]\[(\d+),(\d+)\]")


@dataclass(frozen=True)
class BoundsRect:
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def area(self) -> int:
        return max(0, (self.x2 - self.x1) * (self.y2 - self.y1))

    def contains(self, x: float, y: float, tolerance: float = 0) -> bool:
        """True if (x, y) lies inside the rectangle grown by `tolerance` on every side."""
        return (
            self.x1 - tolerance <= x <= self.x2 + tolerance
            and self.y1 - tolerance <= y <= self.y2 + tolerance
        )


def parse_bounds(bounds_str: Optional[str]) -> Optional[BoundsRect]:
    """
    Parse "[x1,y1][x2,y2]" into a BoundsRect.

    Any other shape (missing, empty, signed, floats, extra text) yields None,
    which simply keeps the node out of spatial matching.
    """
    if not bounds_str or not isinstance(bounds_str, str):
        return None
    m = _BOUNDS_RE.fullmatch(bounds_str)
    if not m:
        return None
    x1, y1, x2, y2 = (int(g) for g in m.groups())
    return BoundsRect(x1=x1, y1=y1, x2=x2, y2=y2)


def distance_to_bounds(x: float, y: float, rect: BoundsRect) -> float:
    """Euclidean distance from a point to the nearest edge of rect (0 when inside)."""
    if x < rect.x1:
        dx = rect.x1 - x
    elif x > rect.x2:
        dx = x - rect.x2
    else:
        dx = 0
    if y < rect.y1:
        dy = rect.y1 - y
    elif y > rect.y2:
        dy = y - rect.y2
    else:
        dy = 0
    return math.hypot(dx, dy)
