"""
Request/response middleware for the standard HTTP client.

Middlewares run in an onion: request hooks in registration order, response and
error hooks in reverse order. Hooks may be plain functions or coroutines.

- ``on_request`` may mutate the context, return a replacement context, or set
  ``context.response`` to short-circuit the transport
- ``on_response`` may mutate or replace the response context
- ``on_error`` may return an ``HttpResponse`` to recover from the failure
"""

from __future__ import annotations

import inspect
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

import structlog

from ..logging_utils import redact_headers
from ..models import HttpResponse, RequestOptions

logger = structlog.get_logger(__name__)


@dataclass
class RequestContext:
    path: str
    options: RequestOptions
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)
    response: HttpResponse[Any] | None = None


@dataclass
class ResponseContext:
    path: str
    options: RequestOptions
    response: HttpResponse[Any]
    timestamp: float
    duration_ms: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorContext:
    path: str
    options: RequestOptions
    error: Exception
    timestamp: float
    duration_ms: float
    metadata: dict[str, Any] = field(default_factory=dict)


RequestHook: TypeAlias = Callable[
    [RequestContext], RequestContext | None | Awaitable[RequestContext | None]
]
ResponseHook: TypeAlias = Callable[
    [ResponseContext], ResponseContext | None | Awaitable[ResponseContext | None]
]
ErrorHook: TypeAlias = Callable[
    [ErrorContext], HttpResponse[Any] | None | Awaitable[HttpResponse[Any] | None]
]


@dataclass
class Middleware:
    """A named set of optional hooks."""
    name: str
    on_request: RequestHook | None = None
    on_response: ResponseHook | None = None
    on_error: ErrorHook | None = None


async def _call(hook: Callable[[Any], Any], context: Any) -> Any:
    result = hook(context)
    if inspect.isawaitable(result):
        result = await result
    return result


class MiddlewareManager:
    """Ordered middleware registry and pipeline runner."""

    def __init__(self) -> None:
        self._middlewares: list[Middleware] = []

    def use(self, middleware: Middleware) -> MiddlewareManager:
        self._middlewares.append(middleware)
        return self

    def remove(self, name: str) -> bool:
        """Remove the first middleware registered under ``name``."""
        for index, middleware in enumerate(self._middlewares):
            if middleware.name == name:
                del self._middlewares[index]
                return True
        return False

    def clear(self) -> None:
        self._middlewares.clear()

    @property
    def middlewares(self) -> list[Middleware]:
        return list(self._middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    async def run_request(self, context: RequestContext) -> RequestContext:
        """Run request hooks in registration order, stopping at a short-circuit."""
        for middleware in list(self._middlewares):
            if middleware.on_request is None:
                continue
            result = await _call(middleware.on_request, context)
            if result is not None:
                context = result
            if context.response is not None:
                logger.debug(
                    "Request short-circuited by middleware",
                    middleware=middleware.name,
                    path=context.path,
                )
                break
        return context

    async def run_response(self, context: ResponseContext) -> ResponseContext:
        for middleware in reversed(self._middlewares):
            if middleware.on_response is None:
                continue
            result = await _call(middleware.on_response, context)
            if result is not None:
                context = result
        return context

    async def run_error(self, context: ErrorContext) -> HttpResponse[Any] | None:
        """Run error hooks in reverse order; the first returned response wins."""
        for middleware in reversed(self._middlewares):
            if middleware.on_error is None:
                continue
            recovered = await _call(middleware.on_error, context)
            if recovered is not None:
                logger.debug(
                    "Error recovered by middleware",
                    middleware=middleware.name,
                    path=context.path,
                    error_type=type(context.error).__name__,
                )
                return recovered
        return None


def logging_middleware(
    *,
    log_headers: bool = False,
    log_body: bool = False,
    log_response: bool = False,
) -> Middleware:
    """Log every request, response and failure. Credentials are redacted."""
    request_logger = structlog.get_logger("venice_ai.requests")

    def on_request(context: RequestContext) -> None:
        event: dict[str, Any] = {
            "method": context.options.method.value,
            "path": context.path,
        }
        if log_headers:
            event["headers"] = redact_headers(context.options.headers)
        if log_body and context.options.body is not None:
            event["body"] = context.options.body
        request_logger.info("Request sent", **event)

    def on_response(context: ResponseContext) -> None:
        event: dict[str, Any] = {
            "path": context.path,
            "status": context.response.status,
            "duration_ms": context.duration_ms,
        }
        if log_response:
            event["response"] = context.response.data
        request_logger.info("Response received", **event)

    def on_error(context: ErrorContext) -> None:
        request_logger.error(
            "Request failed",
            path=context.path,
            error_type=type(context.error).__name__,
            error_message=str(context.error),
            duration_ms=context.duration_ms,
        )

    return Middleware(
        name="logging",
        on_request=on_request,
        on_response=on_response,
        on_error=on_error,
    )


def headers_middleware(headers: dict[str, str]) -> Middleware:
    """Inject fixed headers into every request."""
    extra = dict(headers)

    def on_request(context: RequestContext) -> None:
        context.options.headers.update(extra)

    return Middleware(name="headers", on_request=on_request)


def request_id_middleware(
    header_name: str = "X-Request-ID",
    generator: Callable[[], str] | None = None,
) -> Middleware:
    """Tag every request with a unique id, as a header and in metadata."""
    make_id = generator or (lambda: f"req_{uuid.uuid4().hex}")

    def on_request(context: RequestContext) -> None:
        request_id = make_id()
        context.options.headers[header_name] = request_id
        context.metadata["request_id"] = request_id

    return Middleware(name="request-id", on_request=on_request)


def timing_middleware(header_name: str = "x-response-time") -> Middleware:
    """Record round-trip duration in metadata and on the response headers."""

    def on_request(context: RequestContext) -> None:
        context.metadata["start_time"] = time.perf_counter()

    def on_response(context: ResponseContext) -> None:
        context.metadata["total_duration_ms"] = context.duration_ms
        context.response.headers[header_name] = f"{context.duration_ms}ms"

    return Middleware(name="timing", on_request=on_request, on_response=on_response)
