"""
Model listing.
"""

from __future__ import annotations

from typing import Any

from .base import APIResource


class ModelsResource(APIResource):
    path = "/models"

    async def list(self, type: str | None = None) -> dict[str, Any]:
        """List available models, optionally filtered by type (text, image, ...)."""
        response = await self._http.get(self._path(), {"type": type})
        return response.data

    async def traits(self, type: str | None = None) -> dict[str, Any]:
        response = await self._http.get(self._path("/traits"), {"type": type})
        return response.data

    async def compatibility_mapping(self, type: str | None = None) -> dict[str, Any]:
        response = await self._http.get(
            self._path("/compatibility_mapping"), {"type": type}
        )
        return response.data
