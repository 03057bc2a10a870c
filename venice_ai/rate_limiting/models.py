"""
Rate limiting models and dataclasses.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field

# Header names published by the Venice API on every response
LIMIT_REQUESTS_HEADER = "x-ratelimit-limit-requests"
REMAINING_REQUESTS_HEADER = "x-ratelimit-remaining-requests"
RESET_REQUESTS_HEADER = "x-ratelimit-reset-requests"
LIMIT_TOKENS_HEADER = "x-ratelimit-limit-tokens"
REMAINING_TOKENS_HEADER = "x-ratelimit-remaining-tokens"
RESET_TOKENS_HEADER = "x-ratelimit-reset-tokens"

RATE_LIMIT_HEADERS = (
    LIMIT_REQUESTS_HEADER,
    REMAINING_REQUESTS_HEADER,
    RESET_REQUESTS_HEADER,
    LIMIT_TOKENS_HEADER,
    REMAINING_TOKENS_HEADER,
    RESET_TOKENS_HEADER,
)


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for the client-side rate limiter."""
    max_concurrent: int = 5
    requests_per_minute: int = 60
    window_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if self.requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")


@dataclass
class RateLimitState:
    """Current rate limiting state. Mutated only by the limiter."""
    active_count: int = 0
    # Start times inside the current sliding window, oldest first
    recent_starts: deque[float] = field(default_factory=deque)

    # Statistics
    total_started: int = 0
    total_queued: int = 0

    @property
    def window_count(self) -> int:
        return len(self.recent_starts)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class RateLimitInfo:
    """Server-side rate limit metadata parsed from response headers."""
    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None
    token_limit: int | None = None
    token_remaining: int | None = None
    token_reset: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RateLimitInfo:
        """Build from response headers. Missing or malformed values become None."""
        lowered = {key.lower(): value for key, value in headers.items()}
        return cls(
            limit=_parse_int(lowered.get(LIMIT_REQUESTS_HEADER)),
            remaining=_parse_int(lowered.get(REMAINING_REQUESTS_HEADER)),
            reset=_parse_int(lowered.get(RESET_REQUESTS_HEADER)),
            token_limit=_parse_int(lowered.get(LIMIT_TOKENS_HEADER)),
            token_remaining=_parse_int(lowered.get(REMAINING_TOKENS_HEADER)),
            token_reset=_parse_int(lowered.get(RESET_TOKENS_HEADER)),
        )

    @staticmethod
    def present_in(headers: Mapping[str, str]) -> bool:
        """Whether any rate limit header is present."""
        lowered = {key.lower() for key in headers}
        return any(name in lowered for name in RATE_LIMIT_HEADERS)

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.limit,
                self.remaining,
                self.reset,
                self.token_limit,
                self.token_remaining,
                self.token_reset,
            )
        )
