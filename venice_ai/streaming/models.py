"""
Streaming-specific dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamState(Enum):
    """Parser lifecycle. DONE and ERRORED are terminal."""
    IDLE = "idle"
    READING = "reading"
    LINE_READY = "line_ready"
    DONE = "done"
    ERRORED = "errored"


class StreamEndReason(Enum):
    """Why a completion stream stopped."""
    DONE = "done"            # [DONE] sentinel received
    EOF = "eof"              # transport body ended
    ERROR = "error"          # exception while reading or parsing
    CANCELLED = "cancelled"  # cancellation signal or task cancellation
    CLOSED = "closed"        # consumer stopped early


@dataclass(frozen=True)
class ParsedLine:
    """One dispatched SSE record."""
    data: Any
    is_done: bool = False


@dataclass
class StreamStats:
    """Counters for one parser instance."""
    bytes_received: int = 0
    lines_seen: int = 0
    chunks_parsed: int = 0
    malformed_lines: int = 0
