"""Exception hierarchy for httprequest.

Builder failures are raised by ``Builder.build()``. The executor never raises
these; it carries them in ``Response.error`` instead.
"""

from __future__ import annotations


class HTTPRequestError(Exception):
    """Base class for httprequest errors."""


class BuildError(HTTPRequestError):
    """Raised when a request cannot be materialized (bad method, URL, timeout)."""


class EncodeError(BuildError):
    """Raised when the body encoder fails. The encoder's exception is the cause."""


class TransportError(HTTPRequestError):
    """Raised when the transport fails to deliver a request (timeout, connect, etc.)."""


class DecodeError(HTTPRequestError):
    """Raised when the response decoder fails. The decoder's exception is the cause."""


class StatusError(HTTPRequestError):
    """Raised by ``Response.raise_for_status()`` for non-2xx responses."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Unexpected status code: {status}")
