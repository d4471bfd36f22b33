"""XML documents as plain Python values.

The XML encoder and decoder exchange documents as single-key mappings
``{root_tag: content}`` so that XML bodies go through the same pydantic
validation as JSON bodies. Content follows these rules in both directions:

- a mapping holds child elements by tag, ``@name`` keys for attributes and
  ``#text`` for text that sits next to children or attributes
- a list under a tag is a run of repeated sibling elements
- a scalar is the element's text (booleans as ``true``/``false``)
- ``None`` is an empty element

Namespaces are stripped when parsing and never written.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections import defaultdict
from typing import Any, Iterable, Mapping

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"

# XML 1.0 NCName (Name without colons)
_NAME_START = (
    "A-Z_a-z\u00c0-\u00d6\u00d8-\u00f6\u00f8-\u02ff\u0370-\u037d\u037f-\u1fff"
    "\u200c-\u200d\u2070-\u218f\u2c00-\u2fef\u3001-\ud7ff\uf900-\ufdcf"
    "\ufdf0-\ufffd\U00010000-\U000effff"
)
_NAME_REST = _NAME_START + "\\-.0-9\u00b7\u0300-\u036f\u203f-\u2040"
_NAME = re.compile(f"[{_NAME_START}][{_NAME_REST}]*")

# Characters outside the XML 1.0 Char production
_ILLEGAL_CHAR = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def parse_document(data: bytes, force_list: Iterable[str] = ()) -> dict[str, Any]:
    """Parse XML *data* into ``{root_tag: content}``.

    Tags named in *force_list* are always collected into a list, even when
    a single element is present.

    Raises:
        ET.ParseError: If *data* is not well-formed XML.
    """
    root = ET.fromstring(data)
    return {local_name(root.tag): _content(root, frozenset(force_list))}


def render_document(document: Mapping[str, Any]) -> bytes:
    """Serialize ``{root_tag: content}`` to compact UTF-8 XML.

    Raises:
        ValueError: If *document* is not a single-key mapping, or a tag,
            attribute name or text cannot be written as XML.
    """
    if not isinstance(document, Mapping) or len(document) != 1:
        size = len(document) if isinstance(document, Mapping) else "no"
        raise ValueError(
            f"XML document must be a mapping with exactly one top-level key "
            f"(the root element), got {type(document).__name__} with {size} keys"
        )
    ((root_tag, content),) = document.items()
    return render_element(build_element(root_tag, content))


def render_element(element: ET.Element) -> bytes:
    return ET.tostring(element, encoding="utf-8", xml_declaration=False)


def build_element(tag: Any, content: Any) -> ET.Element:
    element = ET.Element(checked_name(tag))

    if isinstance(content, Mapping):
        for key, value in content.items():
            if key == TEXT_KEY:
                element.text = _text(value)
            elif isinstance(key, str) and key.startswith(ATTRIBUTE_PREFIX):
                element.set(checked_name(key[len(ATTRIBUTE_PREFIX):]), _text(value))
            elif isinstance(value, (list, tuple)):
                element.extend(build_element(key, item) for item in value)
            else:
                element.append(build_element(key, value))
    elif isinstance(content, (list, tuple)):
        element.extend(build_element("item", item) for item in content)
    elif content is not None:
        element.text = _text(content)

    return element


def checked_name(name: Any) -> str:
    """Return *name* if it is a valid XML element/attribute name.

    Raises:
        ValueError: Otherwise.
    """
    if not isinstance(name, str) or not _NAME.fullmatch(name):
        raise ValueError(f"Invalid XML name: {name!r}")
    return name


def local_name(tag: str) -> str:
    """``{http://...}Name`` -> ``Name``."""
    return tag.rpartition("}")[2]


def _content(element: ET.Element, force_list: frozenset[str]) -> Any:
    fields: dict[str, Any] = {
        ATTRIBUTE_PREFIX + name: value
        for name, value in element.attrib.items()
        if not name.startswith("{")
    }

    children: defaultdict[str, list[Any]] = defaultdict(list)
    for child in element:
        children[local_name(child.tag)].append(_content(child, force_list))
    for tag, values in children.items():
        fields[tag] = values if tag in force_list or len(values) > 1 else values[0]

    text = (element.text or "").strip()
    if not fields:
        return text or None
    if text:
        fields[TEXT_KEY] = text
    return fields


def _text(value: Any) -> str:
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    if _ILLEGAL_CHAR.search(text):
        raise ValueError(f"Text contains characters not allowed in XML: {text!r}")
    return text
