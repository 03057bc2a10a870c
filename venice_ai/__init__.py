"""
Async Python SDK for the Venice AI API.

This package provides:
- A rate-limited request pipeline with pluggable middleware
- Incremental SSE streaming for chat completions
- A typed error hierarchy with recovery hints
- Resource wrappers for chat, embeddings, images, audio, models, API keys,
  characters, VVV and billing
"""

from __future__ import annotations

from .client import VeniceClient
from .config import ClientConfig, Configuration
from .events import (
    ClientObserver,
    ErrorEvent,
    RequestEvent,
    ResponseEvent,
    StreamEndEvent,
)
from .exceptions import (
    ErrorKind,
    RecoveryHint,
    VeniceAPIError,
    VeniceAuthError,
    VeniceCancelledError,
    VeniceCapacityError,
    VeniceError,
    VeniceNetworkError,
    VenicePaymentRequiredError,
    VeniceRateLimitError,
    VeniceStreamError,
    VeniceTimeoutError,
    VeniceValidationError,
)
from .http import (
    CompletionStream,
    Middleware,
    StandardHttpClient,
    StreamingHttpClient,
    headers_middleware,
    logging_middleware,
    request_id_middleware,
    timing_middleware,
)
from .logging_utils import configure_logging
from .models import (
    HttpMethod,
    HttpResponse,
    MultipartForm,
    RequestOptions,
    ResponseType,
)
from .rate_limiting import RateLimitConfig, RateLimiter, RateLimitInfo
from .streaming import SSEStreamParser, StreamEndReason, parse_sse_stream

__all__ = [
    "ClientConfig",
    "ClientObserver",
    "CompletionStream",
    "Configuration",
    "ErrorEvent",
    "ErrorKind",
    "HttpMethod",
    "HttpResponse",
    "Middleware",
    "MultipartForm",
    "RateLimitConfig",
    "RateLimitInfo",
    "RateLimiter",
    "RecoveryHint",
    "RequestEvent",
    "RequestOptions",
    "ResponseEvent",
    "ResponseType",
    "SSEStreamParser",
    "StandardHttpClient",
    "StreamEndEvent",
    "StreamEndReason",
    "StreamingHttpClient",
    "VeniceAPIError",
    "VeniceAuthError",
    "VeniceCancelledError",
    "VeniceCapacityError",
    "VeniceClient",
    "VeniceError",
    "VeniceNetworkError",
    "VenicePaymentRequiredError",
    "VeniceRateLimitError",
    "VeniceStreamError",
    "VeniceTimeoutError",
    "VeniceValidationError",
    "configure_logging",
    "headers_middleware",
    "logging_middleware",
    "parse_sse_stream",
    "request_id_middleware",
    "timing_middleware",
]
