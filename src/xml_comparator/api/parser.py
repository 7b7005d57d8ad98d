"""Document-level parsing API.

Module-level functions accept XML from strings, bytes, paths or file-like
objects and return a :class:`Document` wrapping the fingerprinted Node tree.
Malformed input raises :class:`~xml_comparator.tree.ParseError`; file system
errors propagate unchanged.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, TextIO, Union

from xml_comparator.shared import ComparatorConfig, get_logger
from xml_comparator.tree import Node, TreeBuilder, resolve, walk

InputType = Union[str, bytes, BinaryIO, TextIO, Path]

MS_PER_SECOND = 1000


@dataclass
class Document:
    """A parsed XML document ready for comparison."""

    root: Node
    correlation_id: Optional[str] = None
    processing_time_ms: float = 0.0
    source: Optional[str] = None

    @property
    def fingerprint(self) -> int:
        """Fingerprint of the whole document."""
        return self.root.fingerprint

    @property
    def element_count(self) -> int:
        return len(self.iter_nodes())

    @property
    def max_depth(self) -> int:
        """Depth of the deepest element (root = 0)."""
        deepest = 0
        level = [self.root]
        while level:
            level = [child for node in level for child in node.children]
            if level:
                deepest += 1
        return deepest

    def iter_nodes(self) -> List[Node]:
        """All nodes in document order (pre-order)."""
        nodes: List[Node] = []

        def _collect(node: Node) -> bool:
            nodes.append(node)
            return True

        walk(self.root, _collect)
        return nodes

    def find_by_path(self, node_path: str) -> Optional[Node]:
        """Find the node addressed by a path as produced by ``Node.path``."""
        return resolve(self.root, node_path)

    def same_structure(self, other: "Document") -> bool:
        """Check whether two documents have equal fingerprints."""
        return self.fingerprint == other.fingerprint

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the document as a dictionary."""
        return {
            "root": self.root.name,
            "namespace": self.root.namespace,
            "fingerprint": self.fingerprint,
            "element_count": self.element_count,
            "max_depth": self.max_depth,
            "correlation_id": self.correlation_id,
            "processing_time_ms": self.processing_time_ms,
            "source": self.source,
        }


def _build_document(
    content: Union[str, bytes],
    config: Optional[ComparatorConfig],
    correlation_id: Optional[str],
    source: Optional[str] = None
) -> Document:
    start_time = time.time()
    builder = TreeBuilder(config, correlation_id)
    root = builder.build(content)
    return Document(
        root=root,
        correlation_id=builder.correlation_id,
        processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
        source=source,
    )


def parse(
    input_data: InputType,
    config: Optional[ComparatorConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from a string, bytes, Path or file-like object.

    Args:
        input_data: XML content or where to read it from
        config: Optional configuration, defaults to ``ComparatorConfig()``
        correlation_id: Optional correlation ID for build tracking

    Returns:
        Document wrapping the root Node

    Raises:
        ParseError: If the content is not well-formed XML
        TypeError: If the input type is not supported

    Examples:
        >>> document = parse('<root><item>value</item></root>')
        >>> document.root.children[0].path
        '/root/item'
    """
    logger = get_logger(__name__, correlation_id, "parse")
    logger.debug(
        "Starting parse operation",
        extra={"input_type": type(input_data).__name__}
    )

    if isinstance(input_data, (str, bytes)):
        return _build_document(input_data, config, correlation_id)
    if isinstance(input_data, Path):
        return parse_file(input_data, config, correlation_id)
    if hasattr(input_data, "read"):
        source = getattr(input_data, "name", None)
        return _build_document(
            input_data.read(),
            config,
            correlation_id,
            source=str(source) if source is not None else None,
        )
    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


def parse_string(
    xml_string: Union[str, bytes],
    config: Optional[ComparatorConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML held in memory.

    Examples:
        >>> parse_string('<root><a/><a>x</a></root>').find_by_path('/root/a[1]').text
        'x'
    """
    return _build_document(xml_string, config, correlation_id)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ComparatorConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse an XML file.

    The file is read as bytes so that the parser honors the document's own
    encoding declaration.

    Raises:
        ParseError: If the file content is not well-formed XML
        OSError: If the file cannot be read
    """
    path_obj = Path(file_path)
    logger = get_logger(__name__, correlation_id, "parse_file")
    logger.info("Reading XML file", extra={"file_path": str(path_obj)})

    content = path_obj.read_bytes()
    return _build_document(content, config, correlation_id, source=str(path_obj))
