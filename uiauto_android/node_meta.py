# uiauto_android/node_meta.py

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

# dataclass field -> uiautomator attribute
ATTRIBUTE_MAP: Dict[str, str] = {
    "resource_id": "resource-id",
    "text": "text",
    "class_name": "class",
    "content_desc": "content-desc",
    "bounds": "bounds",
    "clickable": "clickable",
    "enabled": "enabled",
    "focusable": "focusable",
    "focused": "focused",
    "editable": "editable",
    "scrollable": "scrollable",
    "visible_to_user": "visible-to-user",
    "package": "package",
}


@dataclass(frozen=True)
class NodeMeta:
    """
    Flat metadata record for one accessibility node.

    Values are kept exactly as the device serialized them: every field is a
    string and boolean flags are "true"/"false" (or "" when absent).
    """
    resource_id: str = ""
    text: str = ""
    class_name: str = ""
    content_desc: str = ""
    bounds: str = ""
    clickable: str = ""
    enabled: str = ""
    focusable: str = ""
    focused: str = ""
    editable: str = ""
    scrollable: str = ""
    visible_to_user: str = ""
    package: str = ""

    @property
    def is_visible(self) -> bool:
        return self.visible_to_user == "true"

    @property
    def is_interactive(self) -> bool:
        return "true" in (self.clickable, self.focusable, self.editable)

    @property
    def quality_score(self) -> int:
        """3 for a resource-id, 2 for a content-desc, 1 for text."""
        return (
            (3 if self.resource_id else 0)
            + (2 if self.content_desc else 0)
            + (1 if self.text else 0)
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def extract_node_meta(node: Any) -> Optional[NodeMeta]:
    """Flatten a node's attribute bag. Returns None for nodes that carry no attributes."""
    attrs = getattr(node, "attrs", None)
    if not attrs:
        return None
    return NodeMeta(**{
        field_name: str(attrs.get(attr_name) or "")
        for field_name, attr_name in ATTRIBUTE_MAP.items()
    })
