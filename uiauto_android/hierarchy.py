# uiauto_android/hierarchy.py
"""
@file hierarchy.py
@brief Accessibility-tree parsing for uiautomator hierarchy dumps.

Dumps are parsed with lxml in recover mode: devices occasionally emit
truncated or slightly malformed XML while the UI is animating, and a partial
tree is still useful for matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional, Tuple

from lxml import etree

from .exceptions import HierarchyParseError

ROOT_MARKER = "<hierarchy"
ROOT_TAG = "hierarchy"
NODE_TAG = "node"
_END_TAG = "</hierarchy>"


@dataclass(frozen=True)
class HierarchyNode:
    """Read-only view of one tree node: its attribute bag and ordered children."""
    tag: str = NODE_TAG
    attrs: Mapping[str, str] = field(default_factory=dict)
    children: Tuple["HierarchyNode", ...] = ()

    @classmethod
    def from_element(cls, element: Any) -> "HierarchyNode":
        """Convert an lxml element tree iteratively; dumps can nest deeper than the recursion limit."""
        root_kids: List["HierarchyNode"] = []
        stack = [(element, iter(element), root_kids, [])]
        while stack:
            el, children, out, kids = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                out.append(cls(tag=str(el.tag), attrs=dict(el.attrib), children=tuple(kids)))
            elif isinstance(child.tag, str):
                stack.append((child, iter(child), kids, []))
        return root_kids[0]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HierarchyNode":
        """
        Build a node from a JSON-like mapping: {"attrs": {...}, "children": ...}.

        `children` may be missing, a single child mapping, or a list of them.
        """
        raw_children = data.get("children")
        if raw_children is None:
            items = []
        elif isinstance(raw_children, Mapping):
            items = [raw_children]
        else:
            items = list(raw_children)
        attrs = data.get("attrs") or {}
        return cls(
            tag=str(data.get("tag", NODE_TAG)),
            attrs={str(k): str(v) for k, v in attrs.items()},
            children=tuple(cls.from_mapping(c) for c in items),
        )

    def iter(self) -> Iterator["HierarchyNode"]:
        """Depth-first, document-order iteration over this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def has_root_marker(xml: Optional[str]) -> bool:
    return isinstance(xml, str) and ROOT_MARKER in xml


def sanitize_hierarchy_xml(raw: Optional[str]) -> str:
    """Strip shell noise around a dump, keeping `<?xml ...` (or `<hierarchy`) through `</hierarchy>`."""
    s = str(raw or "")
    start = s.find("<?xml")
    if start < 0:
        start = s.find(ROOT_MARKER)
    if start < 0:
        return s
    end = s.rfind(_END_TAG)
    if end < 0:
        return s[start:]
    return s[start:end + len(_END_TAG)]


def parse_hierarchy_tree(xml: str) -> Any:
    """Parse a dump into an lxml root element. Raises HierarchyParseError."""
    if not has_root_marker(xml):
        raise HierarchyParseError("Hierarchy XML has no <hierarchy> root")
    parser = etree.XMLParser(recover=True, huge_tree=True, remove_blank_text=True)
    try:
        root = etree.fromstring(xml.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as e:
        raise HierarchyParseError(f"Invalid hierarchy XML: {e}") from e
    if root is None:
        raise HierarchyParseError("Hierarchy XML could not be recovered")
    if root.tag != ROOT_TAG:
        found = root.find(f".//{ROOT_TAG}")
        if found is None:
            raise HierarchyParseError(f"Unexpected root element: {root.tag}")
        root = found
    return root


def parse_hierarchy(xml: str) -> HierarchyNode:
    """Parse a dump into a HierarchyNode rooted at the `<hierarchy>` element."""
    return HierarchyNode.from_element(parse_hierarchy_tree(xml))


def count_nodes(root: HierarchyNode) -> int:
    return sum(1 for n in root.iter() if n.tag == NODE_TAG)

