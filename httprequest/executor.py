"""Executor - Sends built requests and decodes the responses.

``do()`` never raises for build, transport, or decode failures: they are
returned in ``Response.error``. Non-2xx responses are returned as-is with no
decode attempt and no error.
"""

from __future__ import annotations

import atexit
import logging
from threading import Lock
from typing import TYPE_CHECKING, Any, Protocol, get_origin

import httpx
from pydantic import BaseModel, ValidationError

from httprequest.encoding import Decoder
from httprequest.errors import DecodeError, HTTPRequestError, TransportError
from httprequest.models import Request, Response, is_success

if TYPE_CHECKING:
    from httprequest.builder import Builder

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can send an httpx request, e.g. ``httpx.Client``."""

    def send(self, request: httpx.Request) -> httpx.Response: ...


_default_client: httpx.Client | None = None
_default_client_lock = Lock()


def default_client() -> httpx.Client:
    """Shared transport used when a builder has no client set.

    Created on first use and closed at interpreter exit.
    """
    global _default_client
    with _default_client_lock:
        if _default_client is None:
            _default_client = httpx.Client()
            atexit.register(_default_client.close)
        return _default_client


def do(builder: Builder, response_type: Any = Any) -> Response[Any]:
    """Build the request, send it, and decode a 2xx body into *response_type*.

    Args:
        builder: Configured builder. Its ``client`` is the transport (falls
            back to ``default_client()``) and its ``decoder`` decodes the body.
        response_type: Type the body is decoded into.

    Returns:
        Response with status, decoded body (2xx only), error, and the raw
        httpx response.
    """
    try:
        request = builder.build()
    except HTTPRequestError as e:
        logger.debug("Request build failed: %s", e)
        return Response(error=e)

    client = builder.client if builder.client is not None else default_client()

    try:
        http_response = _send(client, request)
    except TransportError as e:
        logger.debug("%s %s failed: %s", request.method, request.url, e)
        return Response(error=e)

    logger.debug(
        "%s %s -> %d", request.method, request.url, http_response.status_code
    )

    if not is_success(http_response.status_code):
        return Response(
            status=http_response.status_code,
            original_response=http_response,
        )

    body = None
    error: Exception | None = None
    try:
        body = parse_response(http_response, builder.decoder, response_type)
    except DecodeError as e:
        logger.debug("Decoding response from %s failed: %s", request.url, e)
        error = e

    return Response(
        status=http_response.status_code,
        body=body,
        error=error,
        original_response=http_response,
    )


def _send(client: Transport, request: Request) -> httpx.Response:
    """Send through the transport, mapping httpx failures to TransportError."""
    try:
        return client.send(request.to_httpx())
    except httpx.TimeoutException as e:
        raise TransportError(f"Request timeout: {e}") from e
    except httpx.ConnectError as e:
        raise TransportError(f"Connection error: {e}") from e
    except httpx.HTTPError as e:
        raise TransportError(f"Request error: {e}") from e
    except httpx.InvalidURL as e:
        raise TransportError(f"Invalid URL: {e}") from e
    except UnicodeEncodeError as e:
        # Non-ASCII in header names/values; HTTP requires ASCII there
        raise TransportError(
            f"Encoding error: non-ASCII character {e.object[e.start:e.end]!r} "
            f"at position {e.start} in request headers"
        ) from e


def parse_response(
    response: httpx.Response,
    decoder: Decoder,
    response_type: Any = Any,
) -> Any:
    """Read the body of *response* and decode it into *response_type*.

    An empty body yields ``zero_value(response_type)`` without calling the
    decoder. The response stays readable after this call.

    Raises:
        DecodeError: If reading the body or the decoder fails.
    """
    try:
        data = response.read()
    except httpx.HTTPError as e:
        raise DecodeError(f"Failed to read response body: {e}") from e

    if not data:
        return zero_value(response_type)

    try:
        return decoder(data, response_type)
    except Exception as e:
        raise DecodeError(f"Failed to decode response body: {e}") from e


_EMPTY_CONSTRUCTIBLE = (dict, list, tuple, set, frozenset, str, bytes, int, float, bool)


def zero_value(response_type: Any) -> Any:
    """Empty value for *response_type*.

    Builtin containers and scalars (also parameterized, e.g. ``dict[str, int]``)
    give their empty constructor. Pydantic models whose fields all have
    defaults give a default instance. Everything else gives None.
    """
    origin = get_origin(response_type) or response_type
    if origin in _EMPTY_CONSTRUCTIBLE:
        return origin()
    if isinstance(origin, type) and issubclass(origin, BaseModel):
        try:
            return origin.model_validate({})
        except ValidationError:
            return None
    return None
