"""
Base class for API resource wrappers.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import VeniceValidationError
from ..http.standard import StandardHttpClient


class APIResource:
    """Thin wrapper that shapes requests and returns response data."""

    path: str = ""

    def __init__(self, http: StandardHttpClient):
        self._http = http

    def _path(self, suffix: str = "") -> str:
        return f"{self.path}{suffix}"

    @staticmethod
    def _require(value: Any, name: str) -> None:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise VeniceValidationError(
                f"Missing required parameter: {name}",
                details={name: "is required"},
            )
