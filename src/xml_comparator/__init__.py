"""XML Comparator.

Builds in-memory trees of XML documents in which every element carries a
structural fingerprint and a root-relative path, the building blocks for
comparing two documents for semantic equality or diffing them node by node.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Configured builder - TreeBuilder with ComparatorConfig
- Level 3: Tree primitives - fingerprint(), path(), walk(), stringify()
"""

__version__ = "0.1.0"
__author__ = "XML Comparator Team"

# Level 1: Simple functions
from .api import Document, parse, parse_file, parse_string

# Configuration classes for advanced usage
from .shared.config import ComparatorConfig, GlobalConfig, TreeConfig

# Level 2 and 3: builder, node model and tree primitives
from .tree import (
    Attribute,
    Node,
    ParseError,
    TreeBuilder,
    fingerprint,
    path,
    stringify,
    walk,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "Document",

    # Level 2: Configured builder
    "TreeBuilder",
    "ComparatorConfig",
    "TreeConfig",
    "GlobalConfig",

    # Level 3: Node model and primitives
    "Attribute",
    "Node",
    "ParseError",
    "fingerprint",
    "path",
    "stringify",
    "walk",
]
