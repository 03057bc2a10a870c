"""
Chat completions.
"""

from __future__ import annotations

from typing import Any

from ..http.standard import StandardHttpClient
from ..http.streaming import (
    CHAT_COMPLETIONS_PATH,
    CompletionStream,
    StreamingHttpClient,
)
from ..models import RequestOptions
from ..validation import validate_chat_completion_request
from .base import APIResource


class ChatResource(APIResource):
    path = CHAT_COMPLETIONS_PATH

    def __init__(self, http: StandardHttpClient, streaming: StreamingHttpClient):
        super().__init__(http)
        self._streaming = streaming

    async def create_completion(
        self, request: dict[str, Any], options: RequestOptions | None = None
    ) -> dict[str, Any]:
        """Create a complete (non-streaming) chat completion."""
        body = {**request, "stream": False} if isinstance(request, dict) else request
        validate_chat_completion_request(body)
        response = await self._http.post(self.path, body, options)
        return response.data

    def stream_completion(
        self, request: dict[str, Any], options: RequestOptions | None = None
    ) -> CompletionStream:
        """
        Stream a chat completion chunk by chunk.

        Example:
            async with client.chat.stream_completion(request) as stream:
                async for chunk in stream:
                    print(chunk["choices"][0]["delta"].get("content", ""))
        """
        return self._streaming.create_completion_stream(request, self.path, options)
