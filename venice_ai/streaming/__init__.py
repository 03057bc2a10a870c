"""
Streaming support for Venice chat completions.

This module contains:
- Incremental SSE parsing with UTF-8 carry-over
- Stream lifecycle models
"""

from .models import ParsedLine, StreamEndReason, StreamState
from .parser import SSEStreamParser, parse_sse_stream

__all__ = [
    "ParsedLine",
    "SSEStreamParser",
    "StreamEndReason",
    "StreamState",
    "parse_sse_stream",
]
