"""httprequest - Fluent builder for outbound HTTP requests.

Build a request from a host and options, send it through an httpx transport,
and decode the body into the type you ask for:

    from httprequest import new_builder, path, param, query

    response = new_builder(
        "https://api.example.com",
        path("/users/:id"),
        param("id", 7),
        query("expand", "address"),
    ).do(User)
"""

import logging

from httprequest.builder import Builder, Option, new_builder, render_path
from httprequest.encoding import (
    Decoder,
    Encoder,
    json_decode,
    json_encode,
    text_decode,
    text_encoder,
    xml_decode,
    xml_decoder,
    xml_encode,
)
from httprequest.errors import (
    BuildError,
    DecodeError,
    EncodeError,
    HTTPRequestError,
    StatusError,
    TransportError,
)
from httprequest.executor import Transport, default_client, do, parse_response, zero_value
from httprequest.models import Request, Response
from httprequest.options import (
    body,
    client,
    decoder,
    encoder,
    header,
    headers,
    json_body,
    method,
    param,
    params,
    path,
    queries,
    query,
    text_body,
    timeout,
    xml_body,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Builder",
    "BuildError",
    "DecodeError",
    "Decoder",
    "EncodeError",
    "Encoder",
    "HTTPRequestError",
    "Option",
    "Request",
    "Response",
    "StatusError",
    "Transport",
    "TransportError",
    "body",
    "client",
    "decoder",
    "default_client",
    "do",
    "encoder",
    "header",
    "headers",
    "json_body",
    "json_decode",
    "json_encode",
    "method",
    "new_builder",
    "param",
    "params",
    "parse_response",
    "path",
    "queries",
    "query",
    "render_path",
    "text_body",
    "text_decode",
    "text_encoder",
    "timeout",
    "xml_body",
    "xml_decode",
    "xml_decoder",
    "xml_encode",
    "zero_value",
]
