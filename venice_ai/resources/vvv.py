"""
VVV token information.
"""

from __future__ import annotations

from typing import Any

from .base import APIResource


class VVVResource(APIResource):
    path = "/vvv"

    async def circulating_supply(self) -> dict[str, Any]:
        response = await self._http.get(self._path("/circulatingsupply"))
        return response.data

    async def utilization(self) -> dict[str, Any]:
        response = await self._http.get(self._path("/utilization"))
        return response.data

    async def staking_yield(self) -> dict[str, Any]:
        response = await self._http.get(self._path("/staking_yield"))
        return response.data
