"""
HTTP layer for the Venice API.

This module contains:
- The single-shot client with middleware
- The SSE streaming client
- Translation of failures into typed errors
"""

from .base import BaseHttpClient
from .error_handler import ErrorFactory, ErrorHandler
from .middleware import (
    ErrorContext,
    Middleware,
    MiddlewareManager,
    RequestContext,
    ResponseContext,
    headers_middleware,
    logging_middleware,
    request_id_middleware,
    timing_middleware,
)
from .standard import StandardHttpClient
from .streaming import CompletionStream, StreamingHttpClient

__all__ = [
    "BaseHttpClient",
    "CompletionStream",
    "ErrorContext",
    "ErrorFactory",
    "ErrorHandler",
    "Middleware",
    "MiddlewareManager",
    "RequestContext",
    "ResponseContext",
    "StandardHttpClient",
    "StreamingHttpClient",
    "headers_middleware",
    "logging_middleware",
    "request_id_middleware",
    "timing_middleware",
]
