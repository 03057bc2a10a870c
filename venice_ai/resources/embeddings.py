"""
Text embeddings.
"""

from __future__ import annotations

from typing import Any

from ..models import RequestOptions
from ..validation import validate_embedding_request
from .base import APIResource

DEFAULT_EMBEDDING_MODEL = "text-embedding-bge-m3"


class EmbeddingsResource(APIResource):
    path = "/embeddings"

    async def create(
        self, request: dict[str, Any], options: RequestOptions | None = None
    ) -> dict[str, Any]:
        """Embed one string or a list of strings. ``model`` has a default."""
        validate_embedding_request(request)
        payload = {**request, "model": request.get("model") or DEFAULT_EMBEDDING_MODEL}
        response = await self._http.post(self._path(), payload, options)
        return response.data
