"""
Shared plumbing for the standard and streaming HTTP clients.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import Any, TypeVar

import httpx
import structlog

from ..events import ClientObserver
from ..exceptions import VeniceCancelledError
from ..models import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, USER_AGENT

T = TypeVar("T")
from ..rate_limiting.limiter import RateLimiter
from .error_handler import ErrorHandler

logger = structlog.get_logger(__name__)


class BaseHttpClient:
    """
    Holds the default headers, the transport and the collaborators shared by
    both clients.

    Default headers may change at any time; every request works from a copy
    taken when it is dispatched.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        error_handler: ErrorHandler | None = None,
        observer: ClientObserver | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if api_key:
            self.set_auth_token(api_key)
        if headers:
            self._headers.update(headers)

        self._owns_http_client = http_client is None
        self.http_client = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=timeout)
        )
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.error_handler = (
            error_handler if error_handler is not None else ErrorHandler()
        )
        self.observer = observer

    def set_auth_token(self, token: str) -> None:
        self._headers["Authorization"] = f"Bearer {token}"

    def set_header(self, name: str, value: str) -> None:
        self._headers[name] = value

    def remove_header(self, name: str) -> None:
        self._headers.pop(name, None)

    def get_headers(self) -> dict[str, str]:
        """Snapshot of the current default headers."""
        return dict(self._headers)

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def merge_headers(
        defaults: dict[str, str], overrides: dict[str, str]
    ) -> dict[str, str]:
        """Per-request headers win; names compare case-insensitively."""
        merged = {
            name: value
            for name, value in defaults.items()
            if name.lower() not in {key.lower() for key in overrides}
        }
        merged.update(overrides)
        return merged

    async def run_cancellable(
        self, operation: Awaitable[T], cancel_event: asyncio.Event | None
    ) -> T:
        """
        Await ``operation`` unless ``cancel_event`` fires first.

        Raises:
            VeniceCancelledError: If the event is set before the operation ends
        """
        if cancel_event is None:
            return await operation
        if cancel_event.is_set():
            if asyncio.iscoroutine(operation):
                operation.close()
            raise VeniceCancelledError()

        op_task = asyncio.ensure_future(operation)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait(
                {op_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_task.cancel()
            if not op_task.done():
                op_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await op_task

        if op_task.cancelled():
            raise VeniceCancelledError()
        if op_task.exception() is None and cancel_event.is_set():
            # Finished in the same tick as the cancel; the caller asked to stop
            result = op_task.result()
            if isinstance(result, httpx.Response):
                await result.aclose()
            raise VeniceCancelledError()
        return op_task.result()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
