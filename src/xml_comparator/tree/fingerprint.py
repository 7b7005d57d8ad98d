"""Structural fingerprints for XML node trees.

A fingerprint is an unsigned 32-bit hash of a node and its whole subtree. It
covers the element name, the trimmed direct text, the non-namespace
attributes as an unordered set of (name, value) pairs and the fingerprints of
the children in document order. Two subtrees that differ only in attribute
order, namespace declarations or leading/trailing whitespace of their text get
the same fingerprint; reordering children changes it.

Fingerprints are a hash, not a digest: equal fingerprints are a strong hint of
equal structure, suitable for short-circuiting comparisons, but collisions are
possible.

The name, the text and each attribute name and value are fed to the checksum
back to back with no separators, so differently split strings collide:
``<ab/>`` and ``<a>b</a>`` share a fingerprint, as do attributes
``{"ab": "c"}`` and ``{"a": "bc"}``.
"""

import zlib
from typing import TYPE_CHECKING, List, Tuple

if TYPE_CHECKING:
    from .node import Node

_MASK = 0xFFFFFFFF
_CHILD_MULTIPLIER = 31


def checksum(data: str, seed: int = 0) -> int:
    """CRC-32 of the UTF-8 encoding of ``data``, continuing from ``seed``.

    ``checksum(b, checksum(a)) == checksum(a + b)``, so successive calls fold
    values into one running checksum.
    """
    return zlib.crc32(data.encode("utf-8"), seed)


def _content_checksum(node: "Node") -> int:
    value = checksum(node.name)
    value = checksum(node.text, value)

    pairs = sorted(
        (attribute.name, attribute.value)
        for attribute in node.attributes
        if not attribute.is_namespace_declaration
    )
    for name, attribute_value in pairs:
        value = checksum(name, value)
        value = checksum(attribute_value, value)

    return value


def _combine(node: "Node") -> int:
    value = _content_checksum(node)
    for child in node.children:
        value = (_CHILD_MULTIPLIER * value + child._fingerprint) & _MASK
    return value


def fingerprint(node: "Node") -> int:
    """Return the memoized structural fingerprint of ``node``.

    The first call computes the fingerprint of every not yet fingerprinted
    node in the subtree, children strictly before their parent, and caches
    each value on its node. Later calls return the cached value.
    """
    cached = node._fingerprint
    if cached is not None:
        return cached

    # Explicit post-order stack: deep documents would exhaust the recursion limit
    stack: List[Tuple["Node", bool]] = [(node, False)]
    while stack:
        current, children_done = stack.pop()
        if current._fingerprint is not None:
            continue
        if children_done:
            current._fingerprint = _combine(current)
            continue
        stack.append((current, True))
        stack.extend(
            (child, False)
            for child in reversed(current.children)
            if child._fingerprint is None
        )

    return node._fingerprint  # type: ignore[return-value]


def same_structure(left: "Node", right: "Node") -> bool:
    """Check whether two subtrees have equal fingerprints."""
    return fingerprint(left) == fingerprint(right)
