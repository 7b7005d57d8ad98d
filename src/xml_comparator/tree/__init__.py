"""Comparable XML trees.

Key Components:
    Node: One XML element with attributes, character data and children
    TreeBuilder: Builds Node trees from XML text using lxml
    fingerprint: Memoized 32-bit structural hash of a subtree
    path: Root-relative address of a node
    walk: Depth-first, pre-order, short-circuitable traversal
"""

from .builder import ParseError, TreeBuilder, build_tree, link_parents
from .fingerprint import checksum, fingerprint, same_structure
from .node import Attribute, Node, is_namespace_attribute, stringify, walk
from .path import path, resolve

__all__ = [
    "Attribute",
    "Node",
    "ParseError",
    "TreeBuilder",
    "build_tree",
    "checksum",
    "fingerprint",
    "is_namespace_attribute",
    "link_parents",
    "path",
    "resolve",
    "same_structure",
    "stringify",
    "walk",
]
