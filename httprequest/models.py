"""Data models for httprequest.

``Request`` is the materialized, immutable request (Pydantic v2, frozen).
``Response`` is the generic wrapper returned by the executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field

from httprequest.errors import StatusError

T = TypeVar("T")


def is_success(status: int) -> bool:
    """True for 2xx status codes."""
    return 200 <= status < 300


class Request(BaseModel):
    """One materialized HTTP request.

    Header values are lists to support repeated headers. ``content`` is None
    when no body was set, which is different from an empty body.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str = Field(description="HTTP method (GET, POST, etc.)")
    url: str = Field(description="Final URL: host + rendered path + query string")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Request headers (arrays for repeated headers)"
    )
    content: bytes | None = Field(default=None, description="Encoded body")
    timeout: float | None = Field(
        default=None, description="Per-request timeout in seconds (None = transport default)"
    )

    def get_header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or None."""
        wanted = name.lower()
        for key, values in self.headers.items():
            if key.lower() == wanted and values:
                return values[0]
        return None

    def to_httpx(self) -> httpx.Request:
        """Convert to an ``httpx.Request`` ready for ``client.send()``."""
        extensions = None
        if self.timeout is not None:
            extensions = {"timeout": httpx.Timeout(self.timeout).as_dict()}
        return httpx.Request(
            self.method,
            self.url,
            headers=[(key, value) for key, values in self.headers.items() for value in values],
            content=self.content,
            extensions=extensions,
        )


@dataclass
class Response(Generic[T]):
    """Outcome of executing one request.

    ``body`` is only populated for 2xx responses. ``error`` is set when the
    request could not be built, sent, or decoded; non-2xx statuses are not
    errors. ``original_response`` is the untouched httpx response whenever the
    transport produced one.
    """

    status: int = 0
    body: T | None = None
    error: Exception | None = None
    original_response: httpx.Response | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and is_success(self.status)

    def raise_for_error(self) -> None:
        """Re-raise the carried error, if any."""
        if self.error is not None:
            raise self.error

    def raise_for_status(self) -> None:
        """Raise the carried error, or StatusError for a non-2xx status."""
        self.raise_for_error()
        if not is_success(self.status):
            raise StatusError(self.status)
