"""
Text-to-speech.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..models import RequestOptions, ResponseType
from ..validation import validate_speech_request
from .base import APIResource


class AudioResource(APIResource):
    path = "/audio"

    async def speech(
        self, request: dict[str, Any], options: RequestOptions | None = None
    ) -> bytes:
        """
        Synthesize speech.

        Returns:
            The encoded audio, in ``response_format`` (mp3 unless requested
            otherwise)
        """
        validate_speech_request(request)
        options = replace(
            options or RequestOptions(), response_type=ResponseType.ARRAYBUFFER
        )
        response = await self._http.post(self._path("/speech"), request, options)
        return response.data
