"""Tree building from XML text.

This module turns XML text into a :class:`~xml_comparator.tree.node.Node`
tree using lxml as the underlying parser, wires parent back-references and,
by default, computes every node's fingerprint before handing the tree out.
"""

import time
import uuid
from typing import Dict, List, Optional, Tuple, Union
from xml.sax.saxutils import escape

from lxml import etree

from xml_comparator.shared import ComparatorConfig, get_logger

from .fingerprint import fingerprint
from .node import XMLNS, Attribute, Node, walk

XMLInput = Union[str, bytes]

MS_PER_SECOND = 1000


class ParseError(Exception):
    """Raised when input text is not well-formed XML.

    Carries the parser's diagnostic message and, when known, the 1-based line
    and column where parsing failed.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"line {self.line}: {self.message}"
        return f"line {self.line}, column {self.column}: {self.message}"


def link_parents(root: Node) -> None:
    """Point every child's ``parent`` at the node whose children hold it."""
    def _link(node: Node) -> bool:
        for child in node.children:
            child.parent = node
        return True

    walk(root, _link)


class TreeBuilder:
    """Builds Node trees from XML text.

    Examples:
        >>> root = TreeBuilder().build("<root><a/><a>x</a></root>")
        >>> root.children[1].path
        '/root/a[1]'
    """

    def __init__(
        self,
        config: Optional[ComparatorConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ComparatorConfig()
        if correlation_id is None and self.config.global_.enable_correlation_tracking:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

    def _make_parser(self, encoding: Optional[str] = None) -> etree.XMLParser:
        tree_config = self.config.tree
        return etree.XMLParser(
            encoding=encoding,
            resolve_entities=tree_config.resolve_entities,
            huge_tree=tree_config.huge_tree,
            no_network=True,
        )

    def build(self, xml_text: XMLInput) -> Node:
        """Parse ``xml_text`` and return the root node of the resulting tree.

        Args:
            xml_text: Complete XML document. ``str`` input is already decoded, so
                any encoding named in its XML declaration is ignored

        Returns:
            Root Node with parent links set (and fingerprints computed unless
            ``tree.eager_fingerprints`` is disabled)

        Raises:
            ParseError: If the text is not well-formed XML or exceeds the
                configured input size limit
        """
        start_time = time.time()
        # Parse str as the UTF-8 it is encoded to, whatever its declaration says
        encoding = "utf-8" if isinstance(xml_text, str) else None
        data = xml_text.encode("utf-8") if isinstance(xml_text, str) else xml_text

        self.logger.info(
            "Starting tree build",
            extra={"content_length": len(data)}
        )

        limit = self.config.global_.max_input_size_bytes
        if limit is not None and len(data) > limit:
            raise ParseError(
                f"Input of {len(data)} bytes exceeds the limit of {limit} bytes"
            )
        if not data.strip():
            raise ParseError("Document is empty", 1, 1)

        try:
            root_element = etree.fromstring(data, self._make_parser(encoding))
        except etree.XMLSyntaxError as e:
            raise ParseError(e.msg or str(e), e.lineno, e.offset) from e

        root = self._convert_tree(root_element)
        link_parents(root)

        if self.config.tree.eager_fingerprints:
            fingerprint(root)

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self.logger.debug(
            "Tree build completed",
            extra={
                "root": root.name,
                "processing_time_ms": processing_time,
            }
        )
        return root

    def _convert_tree(self, root_element: etree._Element) -> Node:
        root = self._convert_element(root_element)
        pending: List[Tuple[etree._Element, Node]] = [(root_element, root)]
        while pending:
            element, node = pending.pop()
            for child_element in element:
                # Comments, processing instructions and entity references
                if not isinstance(child_element.tag, str):
                    continue
                child = self._convert_element(child_element)
                node.children.append(child)
                pending.append((child_element, child))
        return root

    def _convert_element(self, element: etree._Element) -> Node:
        qname = etree.QName(element)
        return Node(
            name=qname.localname,
            namespace=qname.namespace or "",
            attributes=self._attributes(element),
            raw_content=self._raw_content(element),
            char_data=(element.text or "") + "".join(
                child.tail or "" for child in element
            ),
        )

    def _attributes(self, element: etree._Element) -> List[Attribute]:
        parent = element.getparent()
        inherited: Dict[Optional[str], str] = parent.nsmap if parent is not None else {}

        attributes = [
            Attribute(name=XMLNS, value=uri) if prefix is None
            else Attribute(name=prefix, namespace=XMLNS, value=uri)
            for prefix, uri in element.nsmap.items()
            if inherited.get(prefix) != uri
        ]
        for key, value in element.attrib.items():
            qname = etree.QName(key)
            attributes.append(
                Attribute(name=qname.localname, namespace=qname.namespace or "", value=value)
            )
        return attributes

    def _raw_content(self, element: etree._Element) -> str:
        """Rebuild the inner markup of ``element`` for diagnostics.

        Children are re-serialized by lxml, which repeats every in-scope
        namespace declaration on each child: ``<r xmlns="u"><a/></r>`` yields
        ``<a xmlns="u"/>``, not the original ``<a/>``.
        """
        if not self.config.tree.capture_raw_content:
            return ""
        return escape(element.text or "") + "".join(
            etree.tostring(child, encoding="unicode", with_tail=True)
            for child in element
        )


def build_tree(
    xml_text: XMLInput,
    config: Optional[ComparatorConfig] = None,
    correlation_id: Optional[str] = None
) -> Node:
    """Build a Node tree from XML text; see :meth:`TreeBuilder.build`."""
    return TreeBuilder(config, correlation_id).build(xml_text)
