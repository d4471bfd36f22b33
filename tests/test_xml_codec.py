"""Tests for XML documents as plain Python values.

Tests cover:
- parse_document: elements, namespaces, force_list, empty elements, attributes
- render_document: nested mappings, lists as repeated siblings, None as empty
  elements, attributes, scalar formatting, compact output
- Name and character checks that keep the output well-formed
"""

import xml.etree.ElementTree as ET

import pytest

from httprequest.xml_codec import checked_name, local_name, parse_document, render_document


# =============================================================================
# parse_document tests
# =============================================================================


class TestParseDocument:
    """XML bytes to ``{root: content}``."""

    def test_simple_elements(self) -> None:
        result = parse_document(b"<user><name>ana</name><age>31</age></user>")
        assert result == {"user": {"name": "ana", "age": "31"}}

    def test_nested_elements(self) -> None:
        result = parse_document(b"<user><address><city>Lima</city></address></user>")
        assert result == {"user": {"address": {"city": "Lima"}}}

    def test_empty_element_becomes_none(self) -> None:
        result = parse_document(b"<user><nickname/></user>")
        assert result == {"user": {"nickname": None}}

    def test_whitespace_only_text_is_empty(self) -> None:
        result = parse_document(b"<user><nickname>   </nickname></user>")
        assert result == {"user": {"nickname": None}}

    def test_repeated_siblings_become_list(self) -> None:
        result = parse_document(b"<user><role>a</role><role>b</role></user>")
        assert result == {"user": {"role": ["a", "b"]}}

    def test_single_sibling_stays_scalar(self) -> None:
        result = parse_document(b"<user><role>a</role></user>")
        assert result == {"user": {"role": "a"}}

    def test_force_list_wraps_single_child(self) -> None:
        result = parse_document(b"<user><role>a</role></user>", force_list=["role"])
        assert result == {"user": {"role": ["a"]}}

    def test_force_list_leaves_other_tags_alone(self) -> None:
        result = parse_document(
            b"<user><role>a</role><name>ana</name></user>", force_list={"role"}
        )
        assert result == {"user": {"role": ["a"], "name": "ana"}}

    def test_default_namespace_stripped(self) -> None:
        xml = b'<user xmlns="http://example.com/ns"><name>ana</name></user>'
        assert parse_document(xml) == {"user": {"name": "ana"}}

    def test_prefixed_namespace_stripped(self) -> None:
        xml = b'<ns:user xmlns:ns="http://example.com/ns"><ns:name>ana</ns:name></ns:user>'
        assert parse_document(xml) == {"user": {"name": "ana"}}

    def test_namespaced_attribute_dropped(self) -> None:
        xml = b'<user xmlns:x="http://example.com/x" x:flag="1" id="7"/>'
        assert parse_document(xml) == {"user": {"@id": "7"}}

    def test_attributes_as_at_keys(self) -> None:
        result = parse_document(b'<user><tag id="7">vip</tag></user>')
        assert result == {"user": {"tag": {"@id": "7", "#text": "vip"}}}

    def test_attribute_only_element(self) -> None:
        result = parse_document(b'<user><tag id="7"/></user>')
        assert result == {"user": {"tag": {"@id": "7"}}}

    def test_malformed_xml_raises(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_document(b"<not valid xml")

    def test_empty_bytes_raises(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_document(b"")


class TestLocalName:
    def test_namespaced(self) -> None:
        assert local_name("{http://example.com/ns}user") == "user"

    def test_plain(self) -> None:
        assert local_name("user") == "user"


# =============================================================================
# render_document tests
# =============================================================================


class TestRenderDocument:
    """``{root: content}`` to XML bytes."""

    def test_compact_without_declaration(self) -> None:
        result = render_document({"obj": {"field": "myField"}})
        assert result == b"<obj><field>myField</field></obj>"

    def test_nested_mapping(self) -> None:
        root = ET.fromstring(render_document({"user": {"address": {"city": "Lima"}}}))
        assert root.find("address/city").text == "Lima"

    def test_none_becomes_empty_element(self) -> None:
        root = ET.fromstring(render_document({"user": {"nickname": None}}))
        nickname = root.find("nickname")
        assert nickname is not None
        assert nickname.text is None
        assert len(nickname) == 0

    def test_list_becomes_repeated_siblings(self) -> None:
        root = ET.fromstring(render_document({"user": {"role": ["a", "b", "c"]}}))
        assert [item.text for item in root.findall("role")] == ["a", "b", "c"]

    def test_list_of_mappings(self) -> None:
        data = {"order": {"line": [{"sku": "A1", "qty": 1}, {"sku": "B2", "qty": 3}]}}
        root = ET.fromstring(render_document(data))
        lines = root.findall("line")
        assert len(lines) == 2
        assert lines[0].find("sku").text == "A1"
        assert lines[1].find("qty").text == "3"

    def test_bare_list_uses_item_elements(self) -> None:
        assert render_document({"ids": [1, 2]}) == b"<ids><item>1</item><item>2</item></ids>"

    def test_scalar_formatting(self) -> None:
        root = ET.fromstring(
            render_document({"item": {"count": 42, "price": 9.99, "active": True, "gift": False}})
        )
        assert root.find("count").text == "42"
        assert root.find("price").text == "9.99"
        assert root.find("active").text == "true"
        assert root.find("gift").text == "false"

    def test_attribute_keys_written_as_attributes(self) -> None:
        root = ET.fromstring(render_document({"user": {"@id": 7, "name": "ana"}}))
        assert root.attrib == {"id": "7"}
        assert root.find("name").text == "ana"

    def test_text_key_becomes_element_text(self) -> None:
        root = ET.fromstring(render_document({"user": {"tag": {"@id": "7", "#text": "vip"}}}))
        assert root.find("tag").text == "vip"
        assert root.find("tag").get("id") == "7"

    def test_markup_in_text_is_escaped(self) -> None:
        result = render_document({"note": "a < b & c"})
        assert ET.fromstring(result).text == "a < b & c"

    def test_inverse_of_parse_document(self) -> None:
        data = {
            "user": {
                "@id": "7",
                "name": "ana",
                "role": ["a", "b"],
                "nickname": None,
                "tag": {"@kind": "x", "#text": "vip"},
            }
        }
        assert parse_document(render_document(data)) == data

    def test_multiple_top_level_keys_raises(self) -> None:
        with pytest.raises(ValueError, match="exactly one top-level key"):
            render_document({"a": "1", "b": "2"})

    def test_empty_mapping_raises(self) -> None:
        with pytest.raises(ValueError, match="exactly one top-level key"):
            render_document({})

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(ValueError, match="exactly one top-level key"):
            render_document("not a dict")  # type: ignore[arg-type]


# =============================================================================
# Well-formedness checks
# =============================================================================


class TestNamesAndText:
    """Keys and text that would produce malformed XML are rejected."""

    @pytest.mark.parametrize(
        "name",
        ["user", "_private", "first-name", "v1.2", "Straße", "名前"],
    )
    def test_valid_names(self, name: str) -> None:
        assert checked_name(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "first name", "1st", "-dash", ".dot", "a:b", "a<b", "a&b", 'a"b', 7, None],
    )
    def test_invalid_names(self, name: object) -> None:
        with pytest.raises(ValueError, match="Invalid XML name"):
            checked_name(name)

    def test_element_name_with_space_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid XML name: 'first name'"):
            render_document({"user": {"first name": "a"}})

    def test_invalid_root_name_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid XML name"):
            render_document({"my root": {"a": "1"}})

    def test_invalid_attribute_name_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid XML name"):
            render_document({"user": {"@bad name": "1"}})

    def test_non_string_key_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid XML name: 1"):
            render_document({"user": {1: "a"}})

    def test_control_character_in_text_raises(self) -> None:
        with pytest.raises(ValueError, match="not allowed in XML"):
            render_document({"user": {"name": "a\x00b"}})

    def test_control_character_in_attribute_raises(self) -> None:
        with pytest.raises(ValueError, match="not allowed in XML"):
            render_document({"user": {"@id": "\x07"}})

    def test_tab_and_newline_allowed(self) -> None:
        result = render_document({"note": "a\tb\nc"})
        assert ET.fromstring(result).text == "a\tb\nc"
