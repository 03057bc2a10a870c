"""
Client-side rate limiter with FIFO queuing.

Bounds both the number of in-flight requests and the number of requests started
in any sliding window. Excess work waits in a FIFO queue; nothing is rejected
or dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from .models import RateLimitConfig, RateLimitState

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class RateLimiter:
    """
    Concurrency and requests-per-window limiter.

    Features:
    - At most ``max_concurrent`` tasks running at once
    - At most ``requests_per_minute`` tasks started in any sliding window
    - FIFO start order for queued tasks
    - Task outcomes pass through untouched
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or RateLimitConfig()
        self.state = RateLimitState()
        self._clock = clock
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._reset_handle: asyncio.TimerHandle | None = None

    async def add(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``task`` once capacity is available.

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            Whatever the task returns; whatever it raises propagates unchanged.
        """
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def _acquire(self) -> None:
        self._roll_window()

        if not self._waiters and self._has_capacity():
            self._start_slot()
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self.state.total_queued += 1
        logger.debug(
            "Request queued by rate limiter",
            queued=len(self._waiters),
            active=self.state.active_count,
            window_count=self.state.window_count,
        )
        self._schedule_window_reset()

        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was granted just before cancellation landed
                self._release()
            else:
                with contextlib.suppress(ValueError):
                    self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        self.state.active_count -= 1
        self._dispatch()

    def _dispatch(self) -> None:
        """Start queued tasks in FIFO order while capacity allows."""
        self._roll_window()

        while self._waiters and self._has_capacity():
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            self._start_slot()
            waiter.set_result(None)

        if self._waiters:
            self._schedule_window_reset()

    def _has_capacity(self) -> bool:
        return (
            self.state.active_count < self.config.max_concurrent
            and self.state.window_count < self.config.requests_per_minute
        )

    def _start_slot(self) -> None:
        self.state.recent_starts.append(self._clock())
        self.state.active_count += 1
        self.state.total_started += 1

    def _roll_window(self) -> None:
        """Forget starts that have left the sliding window."""
        cutoff = self._clock() - self.config.window_seconds
        starts = self.state.recent_starts
        while starts and starts[0] <= cutoff:
            starts.popleft()

    def _schedule_window_reset(self) -> None:
        """Wake the queue once the oldest start leaves the window."""
        if self._reset_handle is not None:
            return
        if self.state.window_count < self.config.requests_per_minute:
            return

        oldest = self.state.recent_starts[0]
        delay = max(0.0, oldest + self.config.window_seconds - self._clock())
        self._reset_handle = asyncio.get_running_loop().call_later(
            delay, self._on_window_reset
        )

    def _on_window_reset(self) -> None:
        self._reset_handle = None
        self._dispatch()

    def get_statistics(self) -> dict[str, int | float]:
        """Get current rate limiting statistics."""
        self._roll_window()
        return {
            "active_requests": self.state.active_count,
            "requests_this_window": self.state.window_count,
            "queue_size": len(self._waiters),
            "total_started": self.state.total_started,
            "total_queued": self.state.total_queued,
            "concurrency_utilization": (
                self.state.active_count / self.config.max_concurrent
            ),
            "window_utilization": (
                self.state.window_count / self.config.requests_per_minute
            ),
        }

    async def aclose(self) -> None:
        """Cancel the pending window timer."""
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
