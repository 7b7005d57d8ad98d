"""Tests for building Node trees from XML text."""

import logging

import pytest
from lxml import etree

from xml_comparator.shared import ComparatorConfig
from xml_comparator.tree import (
    Attribute,
    Node,
    ParseError,
    TreeBuilder,
    build_tree,
    link_parents,
)


class TestParseError:
    """Test ParseError construction and rendering."""

    def test_message_with_position(self) -> None:
        """Test the position prefixes the message."""
        error = ParseError("boom", line=3, column=7)

        assert str(error) == "line 3, column 7: boom"
        assert error.message == "boom"
        assert (error.line, error.column) == (3, 7)

    def test_message_with_line_only(self) -> None:
        """Test a missing column is omitted."""
        assert str(ParseError("boom", line=3)) == "line 3: boom"

    def test_message_without_position(self) -> None:
        """Test a message without position is returned as is."""
        assert str(ParseError("boom")) == "boom"


class TestTreeBuilderErrors:
    """Test rejection of malformed input."""

    def test_malformed_xml_raises_parse_error(self) -> None:
        """Test mismatched tags raise ParseError with position."""
        with pytest.raises(ParseError) as exc_info:
            build_tree("<root>\n  <a></b>\n</root>")

        error = exc_info.value
        assert error.line == 2
        assert error.column is not None
        assert str(error).startswith("line 2")
        assert isinstance(error.__cause__, etree.XMLSyntaxError)

    @pytest.mark.parametrize("xml", ["", "   \n", b""])
    def test_empty_input_raises_parse_error(self, xml) -> None:
        """Test empty documents are rejected."""
        with pytest.raises(ParseError, match="Document is empty"):
            build_tree(xml)

    def test_text_only_input_raises_parse_error(self) -> None:
        """Test input without a root element is rejected."""
        with pytest.raises(ParseError):
            build_tree("just text")

    def test_input_over_limit_raises_parse_error(self) -> None:
        """Test the configured input size limit is enforced."""
        config = ComparatorConfig().override(global___max_input_size_bytes=10)

        with pytest.raises(ParseError, match="exceeds the limit of 10 bytes"):
            build_tree("<root>0123456789</root>", config=config)

    def test_parse_errors_are_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test failures are raised to the caller without error logs."""
        caplog.set_level(logging.DEBUG, logger="xml_comparator")

        with pytest.raises(ParseError):
            build_tree("<root>")

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestTreeBuilderStructure:
    """Test the shape of built trees."""

    def test_children_in_document_order(self) -> None:
        """Test children keep document order and duplicates."""
        root = build_tree("<r><b/><a/><b/></r>")
        assert [child.name for child in root.children] == ["b", "a", "b"]

    def test_parent_links(self) -> None:
        """Test every child points at its parent and the root has none."""
        root = build_tree("<r><a><b/><c/></a><d/></r>")

        assert root.parent is None
        stack = [root]
        while stack:
            node = stack.pop()
            for child in node.children:
                assert child.parent is node
                stack.append(child)

    def test_link_parents_on_hand_built_tree(self) -> None:
        """Test link_parents wires nodes created without add_child."""
        leaf = Node(name="leaf")
        middle = Node(name="middle", children=[leaf])
        root = Node(name="root", children=[middle])

        link_parents(root)

        assert leaf.parent is middle
        assert middle.parent is root
        assert root.parent is None

    def test_char_data_is_direct_text_only(self) -> None:
        """Test char data joins text and child tails, skipping descendants."""
        root = build_tree("<r> a<b>inner</b>c<!-- note -->d<?pi x?>e </r>")

        assert root.char_data == " acde "
        assert root.text == "acde"
        assert [child.name for child in root.children] == ["b"]
        assert root.children[0].text == "inner"

    def test_cdata_is_character_data(self) -> None:
        """Test CDATA sections contribute their text."""
        root = build_tree("<r><![CDATA[<x> & y]]></r>")
        assert root.text == "<x> & y"

    def test_names_and_namespaces(self) -> None:
        """Test local names and namespace URIs are split."""
        root = build_tree(
            '<d:r xmlns:d="urn:d" xmlns="urn:default"><child/><d:other/></d:r>'
        )

        assert (root.name, root.namespace) == ("r", "urn:d")
        assert (root.children[0].name, root.children[0].namespace) == ("child", "urn:default")
        assert (root.children[1].name, root.children[1].namespace) == ("other", "urn:d")

    def test_no_namespace_is_empty_string(self) -> None:
        """Test elements outside any namespace have an empty namespace."""
        assert build_tree("<r/>").namespace == ""

    def test_attributes_include_local_namespace_declarations(self) -> None:
        """Test declarations become attributes ahead of regular attributes."""
        root = build_tree(
            '<r xmlns="urn:d" xmlns:p="urn:p" p:x="1" y="2"><p:c z="3"/></r>'
        )

        declarations = {a for a in root.attributes if a.is_namespace_declaration}
        assert declarations == {
            Attribute(name="xmlns", value="urn:d"),
            Attribute(name="p", namespace="xmlns", value="urn:p"),
        }
        assert root.attributes[2:] == [
            Attribute(name="x", namespace="urn:p", value="1"),
            Attribute(name="y", value="2"),
        ]
        assert root.attribute_map() == {"x": "1", "y": "2"}

        child = root.children[0]
        assert child.attributes == [Attribute(name="z", value="3")]

    def test_redeclared_namespace_is_kept(self) -> None:
        """Test a prefix rebound on a child appears on that child."""
        root = build_tree('<r xmlns:p="urn:one"><c xmlns:p="urn:two"/></r>')
        child = root.children[0]

        assert child.attributes == [Attribute(name="p", namespace="xmlns", value="urn:two")]

    def test_raw_content_of_leaf(self) -> None:
        """Test a leaf's raw content is its escaped inner text."""
        root = build_tree("<r><a>x &amp; y &lt; z</a></r>")
        assert root.children[0].raw_content == "x &amp; y &lt; z"

    def test_raw_content_of_inner_node(self) -> None:
        """Test inner nodes keep the markup of their children."""
        root = build_tree('<r>t<a k="v">x</a>tail</r>')
        assert root.raw_content == 't<a k="v">x</a>tail'

    def test_raw_content_repeats_inherited_namespaces(self) -> None:
        """Test re-serialized children carry in-scope namespace declarations."""
        root = build_tree('<r xmlns="u"><a/></r>')
        assert root.raw_content == '<a xmlns="u"/>'

    def test_raw_content_capture_can_be_disabled(self) -> None:
        """Test capture_raw_content=False leaves raw content empty."""
        config = ComparatorConfig().override(tree__capture_raw_content=False)
        root = build_tree("<r><a>x</a></r>", config=config)

        assert root.children[0].raw_content == ""
        assert root.children[0].text == "x"

    def test_unicode_string_input(self) -> None:
        """Test str input with non-ASCII text."""
        assert build_tree("<r>héllo wörld</r>").text == "héllo wörld"

    def test_bytes_input_honors_encoding_declaration(self) -> None:
        """Test bytes are decoded per the XML declaration."""
        data = b'<?xml version="1.0" encoding="ISO-8859-1"?><r>\xe9t\xe9</r>'
        assert build_tree(data).text == "été"

    def test_string_input_ignores_encoding_declaration(self) -> None:
        """Test decoded str input matches the bytes it was decoded from."""
        text = '<?xml version="1.0" encoding="ISO-8859-1"?><r a="à">été</r>'
        from_str = build_tree(text)
        from_bytes = build_tree(text.encode("latin-1"))

        assert from_str.text == from_bytes.text == "été"
        assert from_str.get_attribute("a") == "à"
        assert from_str.fingerprint == from_bytes.fingerprint

    def test_internal_entities_resolved_by_default(self) -> None:
        """Test internal DTD entities are expanded."""
        xml = '<!DOCTYPE r [<!ENTITY e "val">]><r>&e;</r>'
        assert build_tree(xml).text == "val"

    def test_external_entities_not_resolved_by_default(self, tmp_path) -> None:
        """Test the default configuration does not read external entity files."""
        secret = tmp_path / "secret.txt"
        secret.write_text("top-secret", encoding="utf-8")
        xml = f'<!DOCTYPE r [<!ENTITY x SYSTEM "{secret.as_uri()}">]><r>&x;</r>'

        root = build_tree(xml)

        assert "top-secret" not in root.text
        assert "top-secret" not in root.raw_content
        assert root.children == []

    def test_entities_not_resolved_for_untrusted_input(self) -> None:
        """Test the untrusted preset leaves entities unexpanded."""
        xml = '<!DOCTYPE r [<!ENTITY e "val">]><r>&e;</r>'
        root = build_tree(xml, config=ComparatorConfig.untrusted_input())

        assert "val" not in root.text
        assert root.children == []


class TestTreeBuilderContext:
    """Test correlation tracking and logging."""

    def test_correlation_id_generated(self) -> None:
        """Test a correlation ID is generated when tracking is enabled."""
        builder = TreeBuilder()
        assert builder.correlation_id

    def test_correlation_id_kept(self) -> None:
        """Test an explicit correlation ID is used as is."""
        assert TreeBuilder(correlation_id="abc").correlation_id == "abc"

    def test_correlation_tracking_disabled(self) -> None:
        """Test no ID is generated when tracking is disabled."""
        config = ComparatorConfig().override(global___enable_correlation_tracking=False)
        assert TreeBuilder(config).correlation_id is None

    def test_build_logs_with_correlation(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test build start and completion are logged with context."""
        caplog.set_level(logging.DEBUG, logger="xml_comparator.tree.builder")

        TreeBuilder(correlation_id="corr-1").build("<r/>")

        messages = [record.getMessage() for record in caplog.records]
        assert "Starting tree build" in messages
        assert "Tree build completed" in messages
        for record in caplog.records:
            assert record.correlation_id == "corr-1"
            assert record.component == "tree_builder"
