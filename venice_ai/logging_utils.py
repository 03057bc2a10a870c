"""
Logging utilities for the Venice SDK.

Features:
- structlog configuration shared by the CLI-facing configuration layer
- Timed operation context with structured start/finish/failure events
- Header redaction so credentials never reach log output
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import structlog

REDACTED = "[REDACTED]"
SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "cookie"})

logger = structlog.get_logger(__name__)


def configure_logging(level: str | int = "INFO") -> None:
    """Configure structured logging for applications using the SDK."""
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = numeric

    logging.basicConfig(level=level, format="%(message)s")
    logging.getLogger("venice_ai").setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy headers with credentials masked."""
    redacted: dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() not in SENSITIVE_HEADERS:
            redacted[name] = value
        elif value.lower().startswith("bearer "):
            redacted[name] = f"Bearer {REDACTED}"
        else:
            redacted[name] = REDACTED
    return redacted


def elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
) -> AsyncIterator[structlog.stdlib.BoundLogger]:
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(operation=operation, **(context or {}))
    operation_logger.debug("Operation started")
    start_time = time.perf_counter()

    try:
        yield operation_logger
    except Exception as e:
        operation_logger.debug(
            "Operation failed",
            error_type=type(e).__name__,
            error_message=str(e),
            duration_ms=elapsed_ms(start_time),
        )
        raise

    operation_logger.debug(
        "Operation completed successfully", duration_ms=elapsed_ms(start_time)
    )
