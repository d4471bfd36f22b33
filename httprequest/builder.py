"""Builder - Accumulates request configuration and materializes requests.

A Builder starts from a host and is mutated by options (see options.py),
applied in the order given. ``build()`` turns the accumulated state into an
immutable Request:

    builder = new_builder(
        "http://my.host.com",
        method("PATCH"),        # GET by default
        path("/users/:id"),
        param("id", user_id),
        query("verbose", "1"),
        header("Authorization", token),
        json_body(payload),
    )
    request = builder.build()
    response = builder.do(User)
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable

import httpx
from pydantic import ValidationError

from httprequest import executor
from httprequest.encoding import Decoder, Encoder, json_decode, json_encode
from httprequest.errors import BuildError, EncodeError
from httprequest.models import Request

if TYPE_CHECKING:
    from httprequest.executor import Transport
    from httprequest.models import Response

logger = logging.getLogger(__name__)

Option = Callable[["Builder"], None]

DEFAULT_METHOD = "GET"

# RFC 7230 token: valid characters for methods and header names
_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


class Builder:
    """Mutable request configuration.

    Attributes mirror what ends up in the request: ``method``, ``host``,
    ``path`` (template with ``:name`` placeholders), ``params`` (placeholder
    values), ``headers`` and ``queries`` (name -> list of values), ``body``
    and its ``encoder``. ``decoder`` and ``client`` are only used by the
    executor. ``timeout`` is the per-request timeout in seconds.
    """

    def __init__(self, host: str) -> None:
        self.timeout: float | None = None
        self.client: Transport | None = None
        self.method: str = DEFAULT_METHOD
        self.host = host
        self.path = ""
        self.params: dict[str, str] = {}
        self.headers: dict[str, list[str]] = {}
        self.queries: dict[str, list[str]] = {}
        self.body: Any = None
        self.encoder: Encoder = json_encode
        self.decoder: Decoder = json_decode

    def __repr__(self) -> str:
        return f"Builder({self.method} {self.host}{self.path})"

    def apply(self, *options: Option) -> Builder:
        """Apply options in order. Returns self for chaining."""
        for option in options:
            option(self)
        return self

    def build(self) -> Request:
        """Materialize the accumulated configuration into a Request.

        Raises:
            EncodeError: If the encoder fails on the body.
            BuildError: If the method, URL, or timeout is invalid.
        """
        method = self.method or DEFAULT_METHOD
        if not isinstance(method, str) or not _TOKEN.fullmatch(method):
            raise BuildError(f"Invalid HTTP method: {method!r}")

        if self.timeout is not None and self.timeout < 0:
            raise BuildError(f"Invalid timeout: {self.timeout!r} (must be >= 0)")

        rendered_path = render_path(self.path, self.params)

        content: bytes | None = None
        if self.body is not None:
            content = self._encode_body()

        url = build_url(self.host, rendered_path, self.queries)

        try:
            request = Request(
                method=method,
                url=url,
                headers={key: list(values) for key, values in self.headers.items()},
                content=content,
                timeout=self.timeout,
            )
        except ValidationError as e:
            raise BuildError(f"Invalid request: {e}") from e
        logger.debug("Built request %s %s", request.method, request.url)
        return request

    def do(self, response_type: Any = Any) -> Response[Any]:
        """Build, send, and decode. See ``executor.do``."""
        return executor.do(self, response_type)

    def _encode_body(self) -> bytes:
        try:
            content = self.encoder(self.body)
        except Exception as e:
            raise EncodeError(f"Failed to encode request body: {e}") from e

        if isinstance(content, bytearray):
            content = bytes(content)
        if not isinstance(content, bytes):
            raise EncodeError(
                f"Encoder returned {type(content).__name__}, expected bytes"
            )
        return content


def new_builder(host: str, *options: Option) -> Builder:
    """Create a Builder for *host* and apply *options* in order.

    Defaults: GET, no path, no body, JSON encoder/decoder, the shared
    default transport, and no timeout override.
    """
    return Builder(host).apply(*options)


def render_path(template: str, params: dict[str, str]) -> str:
    """Replace every ``:key`` in *template* with its value.

    Keys are substituted in insertion order with plain text replacement. When
    one key is a prefix of another (``:id`` and ``:identity``), the shorter
    key bound first also rewrites the longer placeholder.
    """
    rendered = template
    for key, value in params.items():
        rendered = rendered.replace(f":{key}", value)
    return rendered


def build_url(host: str, rendered_path: str, queries: dict[str, list[str]]) -> str:
    """Join host and path and attach the encoded query string.

    Host and path are kept as written; the URL is only parsed to check it.
    Query keys are sorted, values keep insertion order. The query collection
    replaces any query text present in the path.

    Raises:
        BuildError: If the result is not an absolute http(s) URL with a host.
    """
    raw, fragment_sep, fragment = f"{host}{rendered_path}".partition("#")
    base = raw.partition("?")[0]

    try:
        url = httpx.URL(base)
    except httpx.InvalidURL as e:
        raise BuildError(f"Invalid URL {base!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise BuildError(
            f"Invalid URL {base!r}: expected an absolute http(s) URL with a host"
        )

    pairs = [(key, value) for key in sorted(queries) for value in queries[key]]
    if pairs:
        base = f"{base}?{httpx.QueryParams(pairs)}"
    return base + fragment_sep + fragment


def canonical_header_key(key: str) -> str:
    """Canonical MIME header form: ``content-tyPE`` -> ``Content-Type``.

    Keys that are not valid header tokens are returned unchanged.
    """
    if not _TOKEN.fullmatch(key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))
