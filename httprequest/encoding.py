"""Body encoders and response decoders.

An encoder turns a body value into bytes; a decoder turns response bytes into
a value of the requested type. Both report failure by raising, and the
builder/executor wrap whatever they raise.

Decoders validate through a pydantic ``TypeAdapter``, so the requested type
can be a pydantic model, a dataclass, a typed container or ``Any``.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any, Callable, Iterable, get_origin

from pydantic import BaseModel, TypeAdapter

from httprequest.xml_codec import parse_document, render_document, render_element

Encoder = Callable[[Any], bytes]
Decoder = Callable[[bytes, Any], Any]

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


# =============================================================================
# JSON
# =============================================================================


def json_encode(value: Any) -> bytes:
    """Serialize *value* as compact UTF-8 JSON.

    Pydantic models, dataclasses, datetimes and UUIDs are converted to their
    JSON form first. Anything pydantic cannot convert raises.
    """
    if isinstance(value, BaseModel):
        return value.model_dump_json().encode("utf-8")
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_jsonable,
    ).encode("utf-8")


def json_decode(data: bytes, response_type: Any = Any) -> Any:
    """Parse JSON *data* and validate it into *response_type*."""
    return TypeAdapter(response_type).validate_json(data)


def _jsonable(value: Any) -> Any:
    return _ANY_ADAPTER.dump_python(value, mode="json")


# =============================================================================
# XML
# =============================================================================


def xml_encode(value: Any) -> bytes:
    """Serialize *value* as XML.

    Accepted values:
    - mapping with exactly one top-level key (the root element)
    - pydantic model (root element named after the model class)
    - ``xml.etree.ElementTree.Element``

    Raises:
        ValueError: For any other value, a mapping without a single root, or
            keys and text that are not valid XML.
    """
    if isinstance(value, ET.Element):
        return render_element(value)
    if isinstance(value, BaseModel):
        return render_document({type(value).__name__: value.model_dump(mode="json")})
    if isinstance(value, dict):
        return render_document(value)
    raise ValueError(f"Cannot encode {type(value).__name__} as XML")


def xml_decoder(force_list: Iterable[str] = ()) -> Decoder:
    """Return an XML decoder.

    Tags named in *force_list* always decode to lists, so a model field such
    as ``roles: list[Role]`` validates whether the response carries one
    ``<roles>`` element or several:

        builder.apply(decoder(xml_decoder(force_list={"roles"})))

    Mapping targets (``dict``, ``Any``) receive ``{root_tag: content}``.
    Other targets (models, dataclasses) receive the root element's content,
    so a model's fields line up with the root's children.
    """
    force_list = frozenset(force_list)

    def decode(data: bytes, response_type: Any = Any) -> Any:
        document = parse_document(data, force_list)
        if _wants_mapping(response_type):
            return TypeAdapter(response_type).validate_python(document)
        (content,) = document.values()
        return TypeAdapter(response_type).validate_python(content)

    return decode


xml_decode = xml_decoder()


def _wants_mapping(response_type: Any) -> bool:
    if response_type is Any or response_type is None:
        return True
    return (get_origin(response_type) or response_type) is dict


# =============================================================================
# Plain text
# =============================================================================


def text_encoder(text: str) -> Encoder:
    """Return an encoder that ignores its argument and yields *text*."""
    encoded = text.encode("utf-8")

    def encode(_: Any) -> bytes:
        return encoded

    return encode


def text_decode(data: bytes, response_type: Any = str) -> Any:
    """Decode UTF-8 text. ``bytes`` targets get the raw bytes back."""
    if response_type is bytes:
        return data
    return data.decode("utf-8")
