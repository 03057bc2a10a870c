"""
Incremental SSE parser for streaming chat completions.

Bytes arrive in arbitrary slices; multi-byte UTF-8 characters and lines may be
split across reads. Only the trailing partial line is carried between reads.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import structlog

from ..exceptions import VeniceStreamError
from .models import (
    DATA_PREFIX,
    DONE_SENTINEL,
    ParsedLine,
    StreamState,
    StreamStats,
)

# Longest payload excerpt written to logs for a malformed line
MAX_LOGGED_PAYLOAD = 100

logger = structlog.get_logger(__name__)


class SSEStreamParser:
    """Line-buffered SSE parser with malformed-line recovery."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self.state = StreamState.IDLE
        self.stats = StreamStats()

    @property
    def finished(self) -> bool:
        return self.state in (StreamState.DONE, StreamState.ERRORED)

    def feed(self, data: bytes) -> list[ParsedLine]:
        """
        Decode one read and return every record completed by it.

        Raises:
            VeniceStreamError: If the bytes are not valid UTF-8
        """
        if self.finished:
            return []

        self.state = StreamState.READING
        self.stats.bytes_received += len(data)
        self._buffer += self._decode(data, final=False)

        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._parse_lines(lines)

    def flush(self) -> list[ParsedLine]:
        """Process whatever remains once the transport signals end of body."""
        if self.finished:
            return []

        self._buffer += self._decode(b"", final=True)
        lines = self._buffer.split("\n")
        self._buffer = ""
        results = self._parse_lines(lines)
        if not self.finished:
            self.state = StreamState.DONE
        return results

    def reset(self) -> None:
        """Reset parser state for a new stream."""
        self._decoder.reset()
        self._buffer = ""
        self.state = StreamState.IDLE
        self.stats = StreamStats()

    def _decode(self, data: bytes, *, final: bool) -> str:
        try:
            return self._decoder.decode(data, final=final)
        except UnicodeDecodeError as e:
            self.state = StreamState.ERRORED
            raise VeniceStreamError("Stream contained invalid UTF-8") from e

    def _parse_lines(self, lines: list[str]) -> list[ParsedLine]:
        results: list[ParsedLine] = []

        for raw_line in lines:
            self.state = StreamState.LINE_READY
            parsed = self.parse_line(raw_line)
            self.state = StreamState.READING

            if parsed is None:
                continue
            if parsed.is_done:
                self.state = StreamState.DONE
                results.append(parsed)
                break
            results.append(parsed)

        return results

    def parse_line(self, raw_line: str) -> ParsedLine | None:
        """Turn one complete line into a record, or None when it is skipped."""
        line = raw_line.strip()
        if not line:
            return None
        # SSE comment / keep-alive
        if line.startswith(":"):
            return None

        self.stats.lines_seen += 1
        payload = line[len(DATA_PREFIX):] if line.startswith(DATA_PREFIX) else line

        if payload == DONE_SENTINEL:
            return ParsedLine(data=None, is_done=True)

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            self.stats.malformed_lines += 1
            logger.warning(
                "Skipping malformed stream line",
                error=str(e),
                payload=payload[:MAX_LOGGED_PAYLOAD],
            )
            return None

        self.stats.chunks_parsed += 1
        return ParsedLine(data=data)


async def parse_sse_stream(
    source: AsyncIterable[bytes],
    parser: SSEStreamParser | None = None,
) -> AsyncIterator[Any]:
    """
    Parse an async byte source into JSON payloads.

    Stops at the ``[DONE]`` sentinel; anything after it is never read.
    """
    parser = parser or SSEStreamParser()

    async for data in source:
        for record in parser.feed(data):
            if record.is_done:
                return
            yield record.data

    for record in parser.flush():
        if record.is_done:
            return
        yield record.data
