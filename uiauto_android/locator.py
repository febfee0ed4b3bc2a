# uiauto_android/locator.py
"""
@file locator.py
@brief XPath locator synthesis for resolved nodes.

A locator is `//*[@class=<lit> and @<attr>=<lit>]`: the class clause plus
exactly one identifying clause, picked from IDENTIFYING_CLAUSES in order.
Literals follow XPath 1.0, which has no escape sequences:

    no double quote          -> "value"
    double quote, no single  -> 'value'
    both                     -> concat("a", '"', "b", ...)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from lxml import etree

from .node_meta import NodeMeta

# (NodeMeta field, XPath attribute)
CLASS_CLAUSE: Tuple[str, str] = ("class_name", "class")
IDENTIFYING_CLAUSES: Tuple[Tuple[str, str], ...] = (
    ("resource_id", "resource-id"),
    ("content_desc", "content-desc"),
    ("text", "text"),
)

MAX_EXACT_TEXT = 40
PARTIAL_TEXT_CHARS = 24


def xpath_literal(value: Any) -> str:
    s = "" if value is None else str(value)
    if '"' not in s:
        return f'"{s}"'
    if "'" not in s:
        return f"'{s}'"

    parts = s.split('"')
    pieces: List[str] = []
    for i, part in enumerate(parts):
        if part:
            pieces.append(f'"{part}"')
        if i != len(parts) - 1:
            pieces.append("'\"'")
    return f"concat({', '.join(pieces)})"


def _eq(attr: str, value: str) -> str:
    return f"@{attr}={xpath_literal(value)}"


def _xpath(clauses: List[str]) -> str:
    return f"//*[{' and '.join(clauses)}]"


def identifying_clause(meta: NodeMeta) -> Optional[Tuple[str, str]]:
    """First available (attribute, value) pair by identification priority."""
    for field_name, attr in IDENTIFYING_CLAUSES:
        value = getattr(meta, field_name)
        if value:
            return attr, value
    return None


def build_locator(meta: Optional[NodeMeta]) -> str:
    """
    Build the canonical locator for a node, or "" when it has no class.
    """
    if meta is None:
        return ""
    class_value = getattr(meta, CLASS_CLAUSE[0])
    if not class_value:
        return ""
    clauses = [_eq(CLASS_CLAUSE[1], class_value)]
    ident = identifying_clause(meta)
    if ident:
        clauses.append(_eq(*ident))
    return _xpath(clauses)


# =========================================================
# Scored candidates
# =========================================================

@dataclass
class LocatorCandidate:
    value: str
    score: int
    reason: str
    strategy: str = "xpath"
    match_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "value": self.value,
            "score": self.score,
            "reason": self.reason,
            "match_count": self.match_count,
        }


def normalize_text(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", (text or "").strip())


def looks_dynamic(text: Optional[str]) -> bool:
    """Counters, prices, timestamps: text that will not survive the next run."""
    s = normalize_text(text)
    if not s:
        return True
    if s.isdigit():
        return True
    digits = sum(1 for ch in s if ch.isdigit())
    return digits / max(1, len(s)) > 0.25


def build_locator_candidates(
    meta: Optional[NodeMeta],
    parent_resource_id: Optional[str] = None,
) -> List[LocatorCandidate]:
    """Scored XPath alternatives for a node, best first, without duplicates."""
    if meta is None:
        return []

    cls = meta.class_name
    rid = meta.resource_id
    cd = meta.content_desc
    txt = normalize_text(meta.text)
    class_clauses = [_eq("class", cls)] if cls else []

    candidates: List[LocatorCandidate] = []

    if rid:
        candidates.append(LocatorCandidate(_xpath(class_clauses + [_eq("resource-id", rid)]), 85, "resource-id anchored"))
        candidates.append(LocatorCandidate(_xpath([_eq("resource-id", rid)]), 82, "resource-id only"))

    if cd:
        candidates.append(LocatorCandidate(_xpath(class_clauses + [_eq("content-desc", cd)]), 80, "content-desc anchored"))
        candidates.append(LocatorCandidate(_xpath([_eq("content-desc", cd)]), 78, "content-desc only"))

    if txt and not looks_dynamic(txt):
        if len(txt) <= MAX_EXACT_TEXT:
            candidates.append(LocatorCandidate(_xpath(class_clauses + [_eq("text", txt)]), 68, "exact text"))
        else:
            part = xpath_literal(txt[:PARTIAL_TEXT_CHARS])
            candidates.append(LocatorCandidate(_xpath(class_clauses + [f"contains(@text, {part})"]), 60, "partial text"))

    if parent_resource_id and (rid or cd or txt):
        ident = identifying_clause(meta)
        if ident:
            child = _xpath(class_clauses + [_eq(*ident)])[1:]
            candidates.append(
                LocatorCandidate(f"//*[{_eq('resource-id', parent_resource_id)}]/{child}", 72, "parent anchor")
            )

    seen = set()
    unique: List[LocatorCandidate] = []
    for c in candidates:
        if c.value in seen:
            continue
        seen.add(c.value)
        unique.append(c)
    unique.sort(key=lambda c: c.score, reverse=True)
    return unique


def count_matches(tree: Any, xpath: str) -> int:
    """Number of nodes an XPath selects in a parsed (lxml) hierarchy; 0 if it does not evaluate."""
    if tree is None or not xpath:
        return 0
    try:
        result = tree.xpath(xpath)
    except (etree.XPathEvalError, etree.XPathSyntaxError):
        return 0
    return len(result) if isinstance(result, list) else 0
