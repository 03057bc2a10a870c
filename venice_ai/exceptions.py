"""
Typed error hierarchy for the Venice SDK.

Every failure surfaced to callers is a ``VeniceError`` subclass carrying:
- A stable ``kind`` and machine-readable ``code``
- The HTTP status when one was received
- Structured ``details`` from the API, preserved verbatim
- Advisory recovery hints
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar

from .rate_limiting.models import RateLimitInfo


class ErrorKind(Enum):
    """Error categories callers branch on."""
    API = "api"
    AUTH = "auth"
    PAYMENT_REQUIRED = "payment_required"
    RATE_LIMIT = "rate_limit"
    CAPACITY = "capacity"
    NETWORK = "network"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    STREAM = "stream"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RecoveryHint:
    """Suggested remediation for an error."""
    action: str
    description: str
    example: str | None = None
    automated: bool = False


class VeniceError(Exception):
    """Base Venice SDK error with rich context."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN
    default_code: ClassVar[str] = "VENICE_ERROR"
    default_message: ClassVar[str] = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        recovery_hints: list[RecoveryHint] | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.status_code = status_code
        self.code = code or self.default_code
        self.details = details
        self.recovery_hints = (
            recovery_hints if recovery_hints is not None else self._default_hints()
        )

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="check_logs",
                description="Check the SDK error logs for the full request context",
            )
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "name": type(self).__name__,
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "recovery_hints": [asdict(hint) for hint in self.recovery_hints],
        }


class VeniceAPIError(VeniceError):
    """Non-2xx response from the API."""

    kind = ErrorKind.API
    default_code = "API_ERROR"
    default_message = "API request failed"

    def __init__(
        self, message: str | None = None, status_code: int | None = None, **kwargs
    ):
        super().__init__(message, status_code=status_code, **kwargs)


class VeniceAuthError(VeniceAPIError):
    """Authentication failed (401)."""

    kind = ErrorKind.AUTH
    default_code = "AUTH_ERROR"
    default_message = "Authentication failed"

    def __init__(
        self, message: str | None = None, status_code: int | None = 401, **kwargs
    ):
        super().__init__(message, status_code, **kwargs)

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="check_api_key",
                description="Verify the API key passed to the client is correct",
                example='client = VeniceClient(ClientConfig(api_key="your-api-key"))',
            ),
            RecoveryHint(
                action="get_new_key",
                description="Regenerate an API key at https://venice.ai/settings/api",
            ),
            RecoveryHint(
                action="check_env_vars",
                description="Set VENICE_API_KEY in the environment or a .env file",
                example="export VENICE_API_KEY=your-api-key",
            ),
        ]


class VenicePaymentRequiredError(VeniceAPIError):
    """Insufficient balance (402)."""

    kind = ErrorKind.PAYMENT_REQUIRED
    default_code = "PAYMENT_REQUIRED"
    default_message = "Insufficient USD or VCU balance to complete request"

    def __init__(
        self, message: str | None = None, status_code: int | None = 402, **kwargs
    ):
        super().__init__(message, status_code, **kwargs)

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="add_credits",
                description="Add USD credits or stake VVV to obtain VCU",
            )
        ]


class VeniceRateLimitError(VeniceAPIError):
    """Rate limit exceeded (429) with server-reported quota metadata."""

    kind = ErrorKind.RATE_LIMIT
    default_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Rate limit exceeded"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = 429,
        rate_limit: RateLimitInfo | None = None,
        **kwargs,
    ):
        self.rate_limit = rate_limit or RateLimitInfo()
        super().__init__(message, status_code, **kwargs)

    @property
    def retry_after(self) -> float | None:
        """Seconds until the request window resets, if the server said so."""
        if self.rate_limit.reset is None:
            return None
        return max(0.0, self.rate_limit.reset - time.time())

    def _default_hints(self) -> list[RecoveryHint]:
        if self.rate_limit.reset is not None:
            wait = RecoveryHint(
                action="wait_and_retry",
                description=(
                    f"Wait until {self.rate_limit.reset} (unix time) before retrying"
                ),
                example="await asyncio.sleep(error.retry_after)",
                automated=True,
            )
        else:
            wait = RecoveryHint(
                action="wait_and_retry",
                description="Wait before retrying the request",
                automated=True,
            )
        return [
            wait,
            RecoveryHint(
                action="implement_backoff",
                description="Retry with exponential backoff",
            ),
            RecoveryHint(
                action="use_rate_limiter",
                description="Lower requests_per_minute in the client configuration",
                example="ClientConfig(api_key=key, requests_per_minute=20)",
            ),
            RecoveryHint(
                action="upgrade_plan",
                description="Upgrade your plan for higher rate limits",
            ),
        ]

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["rate_limit"] = asdict(self.rate_limit)
        return data


class VeniceCapacityError(VeniceAPIError):
    """Model at capacity (503)."""

    kind = ErrorKind.CAPACITY
    default_code = "CAPACITY_EXCEEDED"
    default_message = "The model is at capacity. Please try again later."

    def __init__(
        self, message: str | None = None, status_code: int | None = 503, **kwargs
    ):
        super().__init__(message, status_code, **kwargs)

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="retry_later",
                description="Retry the request after a short delay",
                automated=True,
            ),
            RecoveryHint(
                action="try_other_model",
                description="Use a different model from models.list()",
            ),
        ]


class VeniceNetworkError(VeniceError):
    """No response received because of a connection-level failure."""

    kind = ErrorKind.NETWORK
    default_code = "NETWORK_ERROR"
    default_message = "Network error occurred"

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="check_connection",
                description="Verify your internet connection is stable",
            ),
            RecoveryHint(
                action="retry_request",
                description="Retry the request after a short delay",
                automated=True,
            ),
            RecoveryHint(
                action="check_firewall",
                description="Ensure a firewall or proxy is not blocking api.venice.ai",
            ),
        ]


class VeniceTimeoutError(VeniceError):
    """The configured request timeout elapsed."""

    kind = ErrorKind.TIMEOUT
    default_code = "TIMEOUT"
    default_message = "Request timed out"

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="increase_timeout",
                description="Raise the client or per-request timeout",
                example="RequestOptions(timeout=120.0)",
            ),
            RecoveryHint(
                action="retry_request",
                description="Retry the request",
                automated=True,
            ),
        ]


class VeniceValidationError(VeniceError):
    """Caller input rejected before any network call."""

    kind = ErrorKind.VALIDATION
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def _default_hints(self) -> list[RecoveryHint]:
        hints = [
            RecoveryHint(
                action="check_parameters",
                description="Review the request parameters against the API reference",
            )
        ]
        if self.details:
            fields = ", ".join(sorted(self.details))
            hints.insert(
                0,
                RecoveryHint(
                    action="fix_invalid_fields",
                    description=f"Fix the invalid fields: {fields}",
                ),
            )
        return hints


class VeniceStreamError(VeniceError):
    """Failure while consuming a streaming response."""

    kind = ErrorKind.STREAM
    default_code = "STREAM_ERROR"
    default_message = "Stream processing error"

    def _default_hints(self) -> list[RecoveryHint]:
        return [
            RecoveryHint(
                action="retry_stream",
                description="Restart the streaming request",
                automated=True,
            )
        ]


class VeniceCancelledError(VeniceError):
    """The caller cancelled the request."""

    kind = ErrorKind.CANCELLED
    default_code = "REQUEST_CANCELLED"
    default_message = "Request was cancelled"

    def _default_hints(self) -> list[RecoveryHint]:
        return []
