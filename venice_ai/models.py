"""
Core request/response dataclasses for the Venice HTTP pipeline.

This module provides:
- The per-request options envelope
- Multipart form payloads for binary uploads
- The response envelope returned by the standard client
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from .rate_limiting.models import RateLimitInfo

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.venice.ai/api/v1"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "venice-ai-sdk-python/0.1.0"


class HttpMethod(Enum):
    """Supported HTTP methods."""
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PATCH = "PATCH"


class ResponseType(Enum):
    """How the response body is decoded."""
    JSON = "json"
    ARRAYBUFFER = "arraybuffer"
    STREAM = "stream"


@dataclass(frozen=True)
class MultipartForm:
    """multipart/form-data payload. Files map to (filename, content, content_type)."""
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)


@dataclass
class RequestOptions:
    """Per-request options."""
    method: HttpMethod = HttpMethod.GET
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    query: dict[str, Any] | None = None
    timeout: float | None = None
    response_type: ResponseType = ResponseType.JSON
    cancel_event: asyncio.Event | None = None

    @property
    def is_multipart(self) -> bool:
        return isinstance(self.body, MultipartForm)


@dataclass(frozen=True)
class HttpResponse(Generic[T]):
    """Complete response envelope."""
    status: int
    status_text: str
    headers: dict[str, str]
    data: T
    rate_limit: RateLimitInfo | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
