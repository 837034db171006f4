from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no GUI or disk I/O; they can be
used across all layers of the toolkit.
"""

from typing import List, Optional
import logging
import re
import uuid
from lxml import etree as ET

from outline_toolkit.core.models import OutlineNode

__all__ = [
    "generate_node_id",
    "outline_to_element",
    "element_to_outline",
    "serialize_outline",
    "deserialize_outline",
]

logger = logging.getLogger(__name__)

_OUTLINE_TAG = "outline"
_NODE_TAG = "node"


def generate_node_id(length: Optional[int] = None) -> str:
    """Generate a random node id.

    The id is the first *length* hex digits of a UUID4. When *length* is not
    given it is read from the editor configuration (``ids.length``).
    """
    if length is None:
        from outline_toolkit.config import ConfigManager

        length = ConfigManager().get_id_length()
    length = max(4, min(32, int(length)))
    return uuid.uuid4().hex[:length]


# ---------------------------------------------------------------------------
# XML snapshot codec
# ---------------------------------------------------------------------------

# Snapshots are stored as serialized XML so that every restore builds brand
# new node objects. Characters XML 1.0 cannot carry (most C0 controls, lone
# surrogates, U+FFFE/U+FFFF) are written as ``\uXXXX``; a literal backslash
# is doubled.

_UNSAFE_CHARS = re.compile(r"[\\\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
_ESCAPES = re.compile(r"\\(\\|u[0-9a-f]{4})")


def _escape(value: str) -> str:
    def _sub(match: "re.Match[str]") -> str:
        char = match.group()
        return "\\\\" if char == "\\" else "\\u%04x" % ord(char)

    return _UNSAFE_CHARS.sub(_sub, value)


def _unescape(value: str) -> str:
    def _sub(match: "re.Match[str]") -> str:
        code = match.group(1)
        return "\\" if code == "\\" else chr(int(code[1:], 16))

    return _ESCAPES.sub(_sub, value)


def outline_to_element(tree: List[OutlineNode]) -> ET._Element:
    """Build an ``<outline>`` element mirroring *tree*.

    ``expanded`` is written only when set, keeping the tri-state intact.
    """
    root = ET.Element(_OUTLINE_TAG)

    def _append(parent: ET._Element, node: OutlineNode) -> None:
        elem = ET.SubElement(parent, _NODE_TAG)
        elem.set("id", _escape(node.id))
        elem.set("text", _escape(node.text))
        if node.expanded is not None:
            elem.set("expanded", "true" if node.expanded else "false")
        for child in node.children:
            _append(elem, child)

    for node in tree:
        _append(root, node)
    return root


def element_to_outline(root: ET._Element) -> List[OutlineNode]:
    """Rebuild a forest from an ``<outline>`` element."""

    def _build(elem: ET._Element) -> OutlineNode:
        flag = elem.get("expanded")
        return OutlineNode(
            id=_unescape(elem.get("id", "")),
            text=_unescape(elem.get("text", "")),
            children=[_build(child) for child in elem if child.tag == _NODE_TAG],
            expanded=None if flag is None else flag == "true",
        )

    return [_build(elem) for elem in root if elem.tag == _NODE_TAG]


def serialize_outline(tree: List[OutlineNode]) -> bytes:
    """Serialise *tree* to UTF-8 XML bytes; any ``str`` id or text survives."""
    return ET.tostring(outline_to_element(tree), encoding="utf-8")


def deserialize_outline(blob: bytes) -> List[OutlineNode]:
    """Parse bytes produced by :func:`serialize_outline` into a fresh forest."""
    root = ET.fromstring(blob)
    if root.tag != _OUTLINE_TAG:
        raise ValueError(f"Unexpected snapshot root element '{root.tag}'.")
    return element_to_outline(root)
