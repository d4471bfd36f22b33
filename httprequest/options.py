"""Options - Builder mutations.

Each factory returns a callable that mutates a Builder. Options are applied
in the order given to ``new_builder()`` / ``Builder.apply()``, so later
options win for single-valued settings.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from httprequest.builder import Builder, Option, canonical_header_key
from httprequest.encoding import (
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    Decoder,
    Encoder,
    json_encode,
    text_encoder,
    xml_encode,
)
from httprequest.executor import Transport


def timeout(seconds: float | None) -> Option:
    """Per-request timeout in seconds. None keeps the transport default."""
    def option(b: Builder) -> None:
        b.timeout = seconds
    return option


def client(transport: Transport) -> Option:
    """Transport used to send the request (``httpx.Client`` or compatible)."""
    def option(b: Builder) -> None:
        b.client = transport
    return option


def method(name: str) -> Option:
    def option(b: Builder) -> None:
        b.method = name
    return option


def path(template: str) -> Option:
    """Path template. Parameters are written as ``:name``.

    Example:
        path("/:user_id/address/:address_id"),
        param("user_id", 123),
        param("address_id", 2),
    """
    def option(b: Builder) -> None:
        b.path = template
    return option


def param(key: str, value: Any) -> Option:
    """Bind one path parameter. The value is converted with ``str()``."""
    def option(b: Builder) -> None:
        b.params[key] = str(value)
    return option


def params(values: Mapping[str, Any]) -> Option:
    """Bind every entry of *values*, keeping previously bound parameters."""
    def option(b: Builder) -> None:
        for key, value in values.items():
            b.params[key] = str(value)
    return option


def header(key: str, value: Any) -> Option:
    """Append a header value. Existing values for the key are kept.

    The name is canonicalized: ``header("content-tyPE", "x")`` ends up as
    ``Content-Type: x``.
    """
    def option(b: Builder) -> None:
        _append(b.headers, canonical_header_key(key), str(value))
    return option


def headers(values: Mapping[str, Any]) -> Option:
    """Replace the whole header collection.

    Each value is a list of values or a single value; every value is
    converted with ``str()``.
    """
    def option(b: Builder) -> None:
        b.headers = {key: _values(vals) for key, vals in values.items()}
    return option


def query(key: str, value: Any) -> Option:
    """Append a query parameter value. Existing values for the key are kept."""
    def option(b: Builder) -> None:
        _append(b.queries, key, str(value))
    return option


def queries(values: Mapping[str, Any]) -> Option:
    """Replace the whole query collection. Values are handled like ``headers()``."""
    def option(b: Builder) -> None:
        b.queries = {key: _values(vals) for key, vals in values.items()}
    return option


def encoder(func: Encoder) -> Option:
    def option(b: Builder) -> None:
        b.encoder = func
    return option


def decoder(func: Decoder) -> Option:
    def option(b: Builder) -> None:
        b.decoder = func
    return option


def body(value: Any) -> Option:
    """Body value, encoded with the builder's encoder at build time."""
    def option(b: Builder) -> None:
        b.body = value
    return option


def text_body(text: str) -> Option:
    """Send *text* as-is (UTF-8). Does not touch Content-Type."""
    def option(b: Builder) -> None:
        b.body = text
        b.encoder = text_encoder(text)
    return option


def json_body(value: Any) -> Option:
    """JSON body. Also appends ``Content-Type: application/json``."""
    def option(b: Builder) -> None:
        b.body = value
        b.encoder = json_encode
        _append(b.headers, "Content-Type", JSON_CONTENT_TYPE)
    return option


def xml_body(value: Any) -> Option:
    """XML body. Also appends ``Content-Type: application/xml``."""
    def option(b: Builder) -> None:
        b.body = value
        b.encoder = xml_encode
        _append(b.headers, "Content-Type", XML_CONTENT_TYPE)
    return option


def _append(collection: dict[str, list[str]], key: str, value: str) -> None:
    collection.setdefault(key, []).append(value)


def _values(value: Any) -> list[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [str(value)]
    return [str(item) for item in value]
