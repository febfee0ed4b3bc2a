# uiauto_android/matching.py
"""
@file matching.py
@brief Coordinate-to-node matching over a parsed accessibility tree.

Matching is split in two steps:

1. A pure traversal flattens the tree into spatial candidates (every node with
   a valid rectangle that passes the spatial test, in document order).
2. The candidate list is reduced with an ordered tuple of rank functions
   compared lexicographically. Each rank returns a value where larger is
   better, so the winner is `max()` over the rank tuples. On a full tie the
   earliest candidate in document order wins.

Containment ranks: visibility > interactivity > smaller area > id quality > depth.
Proximity ranks:   interactivity > smaller distance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .bounds import BoundsRect, distance_to_bounds, parse_bounds
from .hierarchy import HierarchyNode
from .node_meta import NodeMeta, extract_node_meta


@dataclass(frozen=True)
class Candidate:
    meta: NodeMeta
    rect: BoundsRect
    depth: int
    distance: float = 0.0
    parent_resource_id: str = ""

    @property
    def area(self) -> int:
        return self.rect.area


RankFn = Callable[[Candidate], float]


def rank_visibility(c: Candidate) -> int:
    return 1 if c.meta.is_visible else 0


def rank_interactivity(c: Candidate) -> int:
    return 1 if c.meta.is_interactive else 0


def rank_specificity(c: Candidate) -> int:
    return -c.area


def rank_quality(c: Candidate) -> int:
    return c.meta.quality_score


def rank_depth(c: Candidate) -> int:
    return c.depth


def rank_proximity(c: Candidate) -> float:
    return -c.distance


CONTAINMENT_RANKS: Tuple[RankFn, ...] = (
    rank_visibility,
    rank_interactivity,
    rank_specificity,
    rank_quality,
    rank_depth,
)

PROXIMITY_RANKS: Tuple[RankFn, ...] = (
    rank_interactivity,
    rank_proximity,
)


def _walk(root: HierarchyNode) -> Iterator[Tuple[HierarchyNode, int, str]]:
    """Yield (node, depth, nearest ancestor resource-id) in document order without recursion."""
    stack = [(root, 0, "")]
    while stack:
        node, depth, anchor = stack.pop()
        yield node, depth, anchor
        child_anchor = node.attrs.get("resource-id") or anchor
        for child in reversed(node.children):
            stack.append((child, depth + 1, child_anchor))


def containment_candidates(
    root: Optional[HierarchyNode],
    x: float,
    y: float,
    tolerance: float,
) -> List[Candidate]:
    """All nodes whose rectangle, grown by `tolerance`, contains (x, y)."""
    if root is None:
        return []
    out: List[Candidate] = []
    for node, depth, anchor in _walk(root):
        rect = parse_bounds(node.attrs.get("bounds"))
        if rect is None or not rect.contains(x, y, tolerance):
            continue
        meta = extract_node_meta(node)
        if meta is None:
            continue
        out.append(Candidate(meta=meta, rect=rect, depth=depth, parent_resource_id=anchor))
    return out


def proximity_candidates(
    root: Optional[HierarchyNode],
    x: float,
    y: float,
    radius: float,
) -> List[Candidate]:
    """All nodes whose rectangle edge lies within `radius` of (x, y)."""
    if root is None:
        return []
    out: List[Candidate] = []
    for node, depth, anchor in _walk(root):
        rect = parse_bounds(node.attrs.get("bounds"))
        if rect is None:
            continue
        distance = distance_to_bounds(x, y, rect)
        if distance > radius:
            continue
        meta = extract_node_meta(node)
        if meta is None:
            continue
        out.append(Candidate(meta=meta, rect=rect, depth=depth, distance=distance, parent_resource_id=anchor))
    return out


def pick_best(
    candidates: Sequence[Candidate],
    ranks: Sequence[RankFn],
) -> Optional[Candidate]:
    if not candidates:
        return None
    return max(candidates, key=lambda c: tuple(rank(c) for rank in ranks))


def compare(a: Candidate, b: Candidate, ranks: Sequence[RankFn]) -> int:
    """-1 if a wins, 1 if b wins, 0 on a full tie."""
    for rank in ranks:
        ra, rb = rank(a), rank(b)
        if ra != rb:
            return -1 if ra > rb else 1
    return 0


def find_element_at(
    root: Optional[HierarchyNode],
    x: float,
    y: float,
    tolerance: float,
) -> Optional[Candidate]:
    return pick_best(containment_candidates(root, x, y, tolerance), CONTAINMENT_RANKS)


def find_nearest_element(
    root: Optional[HierarchyNode],
    x: float,
    y: float,
    radius: float,
) -> Optional[Candidate]:
    return pick_best(proximity_candidates(root, x, y, radius), PROXIMITY_RANKS)
