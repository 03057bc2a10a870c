"""
Streaming HTTP client for Server-Sent-Events chat completions.

``stream`` opens a rate-limited streaming response; ``create_completion_stream``
wraps it in a ``CompletionStream`` that yields parsed chunks and guarantees the
response is released and a terminal event is emitted on every exit path.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import AsyncIterator
from dataclasses import replace
from typing import Any

import httpx
import structlog

from ..events import (
    ErrorEvent,
    RequestEvent,
    ResponseEvent,
    StreamEndEvent,
    notify,
)
from ..exceptions import VeniceCancelledError, VeniceError
from ..logging_utils import elapsed_ms
from ..models import RequestOptions
from ..streaming.models import ParsedLine, StreamEndReason, StreamStats
from ..streaming.parser import SSEStreamParser
from ..validation import validate_chat_completion_request
from .base import BaseHttpClient

logger = structlog.get_logger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


class StreamingHttpClient(BaseHttpClient):
    """HTTP client for streaming POST requests."""

    async def stream(
        self,
        path: str,
        body: Any = None,
        options: RequestOptions | None = None,
    ) -> httpx.Response:
        """
        Open a streaming response.

        Only the opening round-trip is rate limited; the body is read by the
        caller. The status is already checked when this returns.

        Raises:
            VeniceError: If the request fails or the status is not 2xx
        """
        options = options or RequestOptions()
        headers = self.merge_headers(
            self.merge_headers(self.get_headers(), {"Accept": "text/event-stream"}),
            options.headers,
        )
        notify(
            self.observer,
            "on_request",
            RequestEvent(method="POST", path=path, streaming=True),
        )
        start_time = time.perf_counter()

        try:
            request = self._build_request(path, body, headers, options)
            response = await self.rate_limiter.add(
                lambda: self._open(request, options.cancel_event)
            )
        except VeniceError as e:
            notify(
                self.observer,
                "on_error",
                ErrorEvent(
                    method="POST",
                    path=path,
                    error=e,
                    duration_ms=elapsed_ms(start_time),
                ),
            )
            raise

        notify(
            self.observer,
            "on_response",
            ResponseEvent(
                method="POST",
                path=path,
                status=response.status_code,
                duration_ms=elapsed_ms(start_time),
            ),
        )
        return response

    def _build_request(
        self,
        path: str,
        body: Any,
        headers: dict[str, str],
        options: RequestOptions,
    ) -> httpx.Request:
        try:
            return self.http_client.build_request(
                "POST",
                self.build_url(path),
                json=body,
                headers=headers,
                params=options.query,
                timeout=(
                    options.timeout if options.timeout is not None else self.timeout
                ),
            )
        except (TypeError, ValueError, httpx.InvalidURL) as e:
            raise self.error_handler.factory.validation_error(
                f"Could not build request: {e}",
                details={"path": path, "error_type": type(e).__name__},
            ) from e

    async def _open(
        self, request: httpx.Request, cancel_event: asyncio.Event | None
    ) -> httpx.Response:
        logger.debug("Opening stream", url=str(request.url))
        try:
            response = await self.run_cancellable(
                self.http_client.send(request, stream=True), cancel_event
            )
        except VeniceCancelledError:
            raise
        except (httpx.TransportError, OSError, TimeoutError) as e:
            self.error_handler.handle_request_error(e)

        try:
            await self.error_handler.handle_response_error(response)
        except BaseException:
            await response.aclose()
            raise
        return response

    def create_completion_stream(
        self,
        body: dict[str, Any],
        path: str = CHAT_COMPLETIONS_PATH,
        options: RequestOptions | None = None,
    ) -> CompletionStream:
        """
        Build a stream of chat completion chunks.

        ``stream`` is forced to true and the body is validated here, before any
        I/O; nothing is sent until the stream is iterated.

        Raises:
            VeniceValidationError: If the request body is invalid
        """
        payload = {**body, "stream": True} if isinstance(body, dict) else body
        validate_chat_completion_request(payload)
        return CompletionStream(self, path, payload, options)


class CompletionStream:
    """
    Async iterator over parsed chunks of one streaming completion.

    Each ``async for`` releases the response when the loop ends, including on
    ``break`` or an exception in the loop body. The async context manager and
    ``aclose`` do the same explicitly. The response is released exactly once.
    """

    def __init__(
        self,
        client: StreamingHttpClient,
        path: str,
        body: dict[str, Any],
        options: RequestOptions | None = None,
    ):
        self._client = client
        self._path = path
        self._body = body
        self._options = options or RequestOptions()
        self._parser = SSEStreamParser()
        self._pending: deque[ParsedLine] = deque()
        self._response: httpx.Response | None = None
        self._reader: AsyncIterator[bytes] | None = None
        self._eof = False
        self._closed = False
        self._start_time = time.perf_counter()
        self.chunks = 0
        self.end_reason: StreamEndReason | None = None

    @property
    def stats(self) -> StreamStats:
        return self._parser.stats

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        try:
            while True:
                try:
                    chunk = await self.__anext__()
                except StopAsyncIteration:
                    return
                yield chunk
        finally:
            # no-op when the stream already ended on its own
            await self._finish(StreamEndReason.CLOSED)

    async def __anext__(self) -> Any:
        if self._closed:
            raise StopAsyncIteration

        try:
            return await self._next_chunk()
        except StopAsyncIteration:
            raise
        except asyncio.CancelledError:
            await self._finish(StreamEndReason.CANCELLED)
            raise
        except VeniceCancelledError as e:
            await self._finish(StreamEndReason.CANCELLED, e)
            raise
        except VeniceError as e:
            await self._finish(StreamEndReason.ERROR, e)
            raise
        except (httpx.HTTPError, httpx.StreamError, OSError, TimeoutError) as e:
            error = self._client.error_handler.factory.from_stream_error(e)
            await self._finish(StreamEndReason.ERROR, error)
            raise error from e

    async def _next_chunk(self) -> Any:
        if self._response is None:
            self._response = await self._client.stream(
                self._path, self._body, replace(self._options)
            )
            self._reader = self._response.aiter_bytes()

        while True:
            if self._pending:
                record = self._pending.popleft()
                if record.is_done:
                    await self._finish(StreamEndReason.DONE)
                    raise StopAsyncIteration
                self._raise_for_error_envelope(record.data)
                self.chunks += 1
                return record.data

            if self._eof:
                await self._finish(StreamEndReason.EOF)
                raise StopAsyncIteration

            data = await self._client.run_cancellable(
                self._read_next(), self._options.cancel_event
            )
            if data is None:
                self._eof = True
                self._pending.extend(self._parser.flush())
            else:
                self._pending.extend(self._parser.feed(data))

    async def _read_next(self) -> bytes | None:
        try:
            return await anext(self._reader)
        except StopAsyncIteration:
            return None

    def _raise_for_error_envelope(self, data: Any) -> None:
        if isinstance(data, dict) and data.get("error"):
            raise self._client.error_handler.factory.from_stream_payload(data)

    async def _finish(
        self, reason: StreamEndReason, error: BaseException | None = None
    ) -> None:
        """Release the response and emit the terminal event, once."""
        if self._closed:
            return
        self._closed = True
        self.end_reason = reason
        self._pending.clear()

        try:
            if self._response is not None:
                await self._response.aclose()
        finally:
            duration = elapsed_ms(self._start_time)
            log = logger.warning if reason is StreamEndReason.ERROR else logger.debug
            log(
                "Stream ended",
                path=self._path,
                reason=reason.value,
                chunks=self.chunks,
                malformed_lines=self.stats.malformed_lines,
                duration_ms=duration,
                error=str(error) if error else None,
            )
            notify(
                self._client.observer,
                "on_stream_end",
                StreamEndEvent(
                    path=self._path,
                    reason=reason,
                    chunks=self.chunks,
                    duration_ms=duration,
                    error=error,
                ),
            )

    async def aclose(self) -> None:
        await self._finish(StreamEndReason.CLOSED)

    async def __aenter__(self) -> CompletionStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            await self._finish(StreamEndReason.CLOSED)
        elif issubclass(exc_type, asyncio.CancelledError | VeniceCancelledError):
            await self._finish(StreamEndReason.CANCELLED, exc_val)
        else:
            await self._finish(StreamEndReason.ERROR, exc_val)
