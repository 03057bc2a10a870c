"""
Character personas.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .base import APIResource


class CharactersResource(APIResource):
    path = "/characters"

    async def list(self, **query: Any) -> dict[str, Any]:
        response = await self._http.get(self._path(), query or None)
        return response.data

    async def get(self, slug: str) -> dict[str, Any]:
        self._require(slug, "slug")
        response = await self._http.get(self._path(f"/{quote(slug, safe='')}"))
        return response.data
