"""
Translation of raw failures into typed Venice errors.

Three failure classes are handled:
- Completed responses with a non-2xx status
- Requests that never received a response (network / timeout)
- Failures while consuming a streaming body
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, NoReturn

import httpx
import structlog
from pydantic import ValidationError

from ..exceptions import (
    ErrorKind,
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
from ..rate_limiting.models import RateLimitInfo

logger = structlog.get_logger(__name__)

GENERIC_API_MESSAGE = "API request failed"


def extract_error_message(body: Any) -> str | None:
    """Pull a human message out of an error body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        nested = error.get("message")
        if isinstance(nested, str) and nested:
            return nested
    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    return None


class ErrorFactory:
    """Builds Venice errors from raw failure data."""

    def from_status(
        self,
        status: int,
        message: str,
        details: dict[str, Any] | None = None,
        headers: httpx.Headers | dict[str, str] | None = None,
    ) -> VeniceAPIError:
        """Map an HTTP status to its error type."""
        if status == 401:
            return VeniceAuthError(message, details=details)
        if status == 402:
            return VenicePaymentRequiredError(message, details=details)
        if status == 429:
            rate_limit = RateLimitInfo.from_headers(headers or {})
            return VeniceRateLimitError(message, rate_limit=rate_limit, details=details)
        if status == 503:
            return VeniceCapacityError(message, details=details)
        return VeniceAPIError(message, status, details=details)

    def from_response(self, response: httpx.Response) -> VeniceAPIError:
        """
        Build an error from a completed, already-read error response.

        A body that is not JSON yields a generic API error named after the
        status line.
        """
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
            return VeniceAPIError(
                f"HTTP error {response.status_code} {response.reason_phrase}".strip(),
                response.status_code,
            )

        message = extract_error_message(body) or GENERIC_API_MESSAGE
        details = body.get("details") if isinstance(body, dict) else None
        return self.from_status(
            response.status_code, message, details, response.headers
        )

    def from_transport_error(self, error: BaseException) -> VeniceError:
        """Build an error for a request that never received a response."""
        if isinstance(error, VeniceError):
            return error
        if isinstance(error, httpx.TimeoutException | TimeoutError):
            return VeniceTimeoutError(f"Request timed out: {error}")
        if isinstance(error, httpx.TransportError | OSError):
            return VeniceNetworkError(f"Network error: {error}")
        return VeniceError(str(error) or "Request setup error")

    def from_stream_error(self, error: BaseException) -> VeniceError:
        """Build an error for a failure while consuming a stream."""
        if isinstance(error, VeniceError):
            return error
        if isinstance(error, asyncio.CancelledError):
            return VeniceCancelledError("Stream was cancelled")
        return VeniceStreamError(f"Stream request failed: {error}")

    def from_stream_payload(self, payload: dict[str, Any]) -> VeniceStreamError:
        """Build an error for an error envelope embedded in SSE data."""
        message = extract_error_message(payload) or "Stream reported an error"
        return VeniceStreamError(message, details=payload)

    def validation_error(
        self, message: str, details: dict[str, Any] | None = None
    ) -> VeniceValidationError:
        return VeniceValidationError(message, details=details)


class ErrorHandler:
    """Raises typed errors for failed requests. Handlers never return."""

    def __init__(self, factory: ErrorFactory | None = None):
        self.factory = factory or ErrorFactory()

    def handle_request_error(self, error: BaseException) -> NoReturn:
        venice_error = self.factory.from_transport_error(error)
        self._log(venice_error)
        if venice_error is error:
            raise venice_error
        raise venice_error from error

    def handle_stream_error(self, error: BaseException) -> NoReturn:
        venice_error = self.factory.from_stream_error(error)
        self._log(venice_error)
        if venice_error is error:
            raise venice_error
        raise venice_error from error

    async def handle_response_error(self, response: httpx.Response) -> None:
        """Raise if the response status is not 2xx."""
        if response.is_success:
            return
        await response.aread()
        venice_error = self.factory.from_response(response)
        self._log(venice_error)
        raise venice_error

    @staticmethod
    def classify_error(error: BaseException) -> tuple[ErrorKind, str]:
        """
        Classify an error and return its kind and category.

        Args:
            error: The exception to classify

        Returns:
            Tuple of (error_kind, error_category)
        """
        if isinstance(error, VeniceError):
            return error.kind, f"{error.kind.value}_error"
        if isinstance(error, ValidationError):
            return ErrorKind.VALIDATION, "validation_error"
        if isinstance(error, httpx.TimeoutException | TimeoutError):
            return ErrorKind.TIMEOUT, "timeout_error"
        if isinstance(error, httpx.TransportError | ConnectionError | OSError):
            return ErrorKind.NETWORK, "connection_error"
        if isinstance(error, httpx.StreamError):
            return ErrorKind.STREAM, "stream_error"
        if isinstance(error, ValueError | TypeError):
            return ErrorKind.VALIDATION, "parameter_error"
        return ErrorKind.UNKNOWN, "unknown_error"

    def _log(self, error: VeniceError) -> None:
        kind, category = self.classify_error(error)
        logger.debug(
            "Request error classified",
            error_kind=kind.value,
            error_category=category,
            error_code=error.code,
            status_code=error.status_code,
            error_message=error.message,
        )
