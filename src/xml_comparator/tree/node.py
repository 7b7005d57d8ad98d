"""Node model for comparable XML trees.

A :class:`Node` is one XML element: its name and namespace, attributes, raw
inner markup, direct character data, ordered children and a back-reference to
its parent. Structural fingerprints and root-relative paths are derived from
these fields by :mod:`xml_comparator.tree.fingerprint` and
:mod:`xml_comparator.tree.path`.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .fingerprint import fingerprint as compute_fingerprint
from .path import path as compute_path

# Namespace of prefixed namespace declarations (xmlns:prefix="uri")
XMLNS = "xmlns"

Visitor = Callable[["Node"], bool]


@dataclass(frozen=True)
class Attribute:
    """A single attribute as it appears on an element.

    Namespace declarations are represented as attributes too: ``xmlns="uri"``
    has ``name == "xmlns"`` and ``xmlns:p="uri"`` has ``namespace == "xmlns"``
    and ``name == "p"``. For regular attributes ``namespace`` is the URI of the
    attribute's namespace, or empty.
    """

    name: str
    namespace: str = ""
    value: str = ""

    @property
    def is_namespace_declaration(self) -> bool:
        """Check if this attribute declares a namespace."""
        return self.namespace == XMLNS or self.name == XMLNS


def is_namespace_attribute(attribute: Attribute) -> bool:
    """Check if an attribute is an ``xmlns`` or ``xmlns:*`` declaration."""
    return attribute.is_namespace_declaration


@dataclass(eq=False)
class Node:
    """Represents a single XML element in a comparable tree.

    Nodes compare by identity. Use :attr:`fingerprint` to compare structure.
    """

    name: str
    namespace: str = ""
    attributes: List[Attribute] = field(default_factory=list)
    raw_content: str = ""
    char_data: str = ""
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False)

    # None until the fingerprint engine fills it in; never invalidated
    _fingerprint: Optional[int] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.name:
            raise ValueError("Node name cannot be empty")

    @property
    def text(self) -> str:
        """Direct character data with leading and trailing whitespace removed."""
        return self.char_data.strip()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def fingerprint(self) -> int:
        """Memoized 32-bit structural hash of this node and its subtree."""
        return compute_fingerprint(self)

    @property
    def path(self) -> str:
        """Root-relative address of this node, e.g. ``/root/item[2]/name``."""
        return compute_path(self)

    def add_child(self, child: "Node") -> None:
        """Append a child node and establish the parent relationship.

        Intended for assembling trees by hand before any fingerprint has been
        read; fingerprints cached on this node or its ancestors are not reset.
        """
        if not isinstance(child, Node):
            raise TypeError("Child must be a Node instance")

        child.parent = self
        self.children.append(child)

    def attribute_map(self) -> Dict[str, str]:
        """Map attribute local names to values, skipping namespace declarations."""
        return {
            attribute.name: attribute.value
            for attribute in self.attributes
            if not attribute.is_namespace_declaration
        }

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a non-namespace attribute value with optional default."""
        return self.attribute_map().get(name, default)

    def get_depth(self) -> int:
        """Get depth of this node in the tree (root = 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def walk(self, visitor: Visitor) -> bool:
        """Visit this node and its descendants; see :func:`walk`."""
        return walk(self, visitor)

    def __str__(self) -> str:
        return stringify(self)


def walk(node: Node, visitor: Visitor) -> bool:
    """Visit ``node`` and its descendants depth-first, in pre-order.

    Children are visited in document order. When ``visitor`` returns a falsy
    value the traversal stops at once: no further node, sibling or descendant,
    is visited.

    Returns:
        True if every node was visited, False if the visitor stopped early
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if not visitor(current):
            return False
        stack.extend(reversed(current.children))
    return True


def stringify(node: Node) -> str:
    """Render a node for diagnostics as ``name[attr=value, ...]``.

    Leaf nodes get their raw inner markup appended after ``" = "``. The
    result is for humans only and plays no part in hashing or equality.
    """
    attributes = ", ".join(
        f"{attribute.name}={attribute.value}" for attribute in node.attributes
    )
    result = f"{node.name}[{attributes}]"

    if not node.children:
        result += " = " + node.raw_content

    return result
