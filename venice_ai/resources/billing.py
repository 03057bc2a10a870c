"""
Billing usage reports.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Literal

from ..models import RequestOptions, ResponseType
from .base import APIResource

SortOrder = Literal["asc", "desc"]


def usage_query(
    currency: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int | None = None,
    limit: int | None = None,
    sort_order: SortOrder | None = None,
) -> dict[str, Any]:
    """Query parameters of GET /billing/usage, under their wire names."""
    return {
        "currency": currency,
        "startDate": start_date,
        "endDate": end_date,
        "page": page,
        "limit": limit,
        "sortOrder": sort_order,
    }


class BillingResource(APIResource):
    path = "/billing"

    async def usage(
        self,
        *,
        options: RequestOptions | None = None,
        **filters: Any,
    ) -> dict[str, Any]:
        """
        Fetch paginated usage entries.

        Args:
            **filters: ``currency``, ``start_date``, ``end_date``, ``page``,
                ``limit`` and ``sort_order``; omitted filters are not sent
        """
        response = await self._http.get(
            self._path("/usage"), usage_query(**filters), options
        )
        return response.data

    async def export_csv(
        self,
        *,
        options: RequestOptions | None = None,
        **filters: Any,
    ) -> str:
        """Fetch the same usage report as CSV text."""
        options = options or RequestOptions()
        options = replace(
            options,
            headers={**options.headers, "Accept": "text/csv"},
            response_type=ResponseType.ARRAYBUFFER,
        )
        response = await self._http.get(
            self._path("/usage"), usage_query(**filters), options
        )
        return response.data.decode("utf-8")
