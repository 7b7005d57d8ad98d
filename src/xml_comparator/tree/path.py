"""Root-relative paths for XML nodes.

A path is the concatenation of one ``/name`` segment per level from the root
down to the node, e.g. ``/root/item[2]/name``. A segment carries a 0-based
index only when the node has siblings.

Siblings are told apart by fingerprint, not identity: the index is that of
the first sibling whose fingerprint equals the node's. When a parent holds
several structurally identical children, all of them report the index of the
first one unless the path is built with ``by_identity=True``.
"""

import re
from typing import TYPE_CHECKING, List, Optional

from .fingerprint import fingerprint

if TYPE_CHECKING:
    from .node import Node

_SEGMENT = re.compile(r"/([^/\[\]]+)(?:\[(\d+)\])?")


def _segment(node: "Node", by_identity: bool) -> str:
    parent = node.parent
    if parent is None or len(parent.children) == 1:
        return "/" + node.name

    if by_identity:
        for index, sibling in enumerate(parent.children):
            if sibling is node:
                return f"/{node.name}[{index}]"
    else:
        target = fingerprint(node)
        for index, sibling in enumerate(parent.children):
            if fingerprint(sibling) == target:
                return f"/{node.name}[{index}]"

    # Unreachable for a consistent tree: node is one of its parent's children
    return "/" + node.name


def path(node: "Node", by_identity: bool = False) -> str:
    """Build the root-relative path of ``node`` by walking parent links.

    Args:
        node: Node to address
        by_identity: Index siblings by the node's own position instead of by
            the first sibling with an equal fingerprint, so that duplicated
            siblings get distinct paths

    Returns:
        Path such as ``/root/item[1]/name``
    """
    segments: List[str] = []
    current: Optional["Node"] = node
    while current is not None:
        segments.append(_segment(current, by_identity))
        current = current.parent

    segments.reverse()
    return "".join(segments)


def resolve(root: "Node", node_path: str) -> Optional["Node"]:
    """Find the node under ``root`` addressed by a path built with :func:`path`.

    Returns None when the path is malformed or does not match the tree.
    Because of fingerprint-based disambiguation, a path to a duplicated
    sibling resolves to the first of the duplicates.
    """
    segments = list(_SEGMENT.finditer(node_path))
    if not segments or "".join(m.group(0) for m in segments) != node_path:
        return None

    first = segments[0]
    if first.group(2) is not None or first.group(1) != root.name:
        return None

    current = root
    for match in segments[1:]:
        name, index = match.group(1), match.group(2)
        children = current.children
        if index is None:
            if len(children) != 1:
                return None
            candidate = children[0]
        else:
            position = int(index)
            if len(children) < 2 or position >= len(children):
                return None
            candidate = children[position]
        if candidate.name != name:
            return None
        current = candidate

    return current
