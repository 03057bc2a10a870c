"""
Observer hooks for request lifecycle notifications.

An observer is injected at client construction. Every hook is optional; the
base class implements each as a no-op. Hook failures are logged and never
alter the outcome of the request they describe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from .streaming.models import StreamEndReason

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RequestEvent:
    method: str
    path: str
    streaming: bool = False


@dataclass(frozen=True)
class ResponseEvent:
    method: str
    path: str
    status: int
    duration_ms: float


@dataclass(frozen=True)
class ErrorEvent:
    method: str
    path: str
    error: Exception
    duration_ms: float


@dataclass(frozen=True)
class StreamEndEvent:
    path: str
    reason: StreamEndReason
    chunks: int
    duration_ms: float
    error: BaseException | None = None


class ClientObserver:
    """Base observer. Override the hooks you need."""

    def on_request(self, event: RequestEvent) -> None:
        pass

    def on_response(self, event: ResponseEvent) -> None:
        pass

    def on_error(self, event: ErrorEvent) -> None:
        pass

    def on_stream_end(self, event: StreamEndEvent) -> None:
        pass


def notify(observer: ClientObserver | None, hook: str, event: Any) -> None:
    """Invoke one observer hook, isolating the caller from observer failures."""
    if observer is None:
        return
    try:
        getattr(observer, hook)(event)
    except Exception as e:
        logger.warning(
            "Observer hook failed",
            hook=hook,
            error_type=type(e).__name__,
            error_message=str(e),
        )
