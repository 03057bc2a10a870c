"""
API key management.

Key management endpoints require an admin key. When one is configured it is
sent instead of the inference key.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import VeniceAPIError
from ..http.standard import StandardHttpClient
from ..models import RequestOptions
from .base import APIResource

DEFAULT_WEB3_KEY_DESCRIPTION = "Web3 API Key"


class APIKeysResource(APIResource):
    path = "/api_keys"

    def __init__(self, http: StandardHttpClient, admin_api_key: str | None = None):
        super().__init__(http)
        self.admin_api_key = admin_api_key

    def _options(self) -> RequestOptions:
        if not self.admin_api_key:
            return RequestOptions()
        return RequestOptions(
            headers={"Authorization": f"Bearer {self.admin_api_key}"}
        )

    async def list(self) -> dict[str, Any]:
        response = await self._http.get(self._path(), options=self._options())
        return response.data

    async def create(
        self,
        description: str,
        api_key_type: str = "INFERENCE",
        consumption_limit: dict[str, Any] | None = None,
        expires_at: str | None = None,
    ) -> dict[str, Any]:
        self._require(description, "description")
        body: dict[str, Any] = {
            "description": description,
            "apiKeyType": api_key_type,
        }
        if consumption_limit is not None:
            body["consumptionLimit"] = consumption_limit
        if expires_at is not None:
            body["expiresAt"] = expires_at

        response = await self._http.post(self._path(), body, self._options())
        return response.data

    async def delete(self, id: str) -> dict[str, Any]:
        self._require(id, "id")
        response = await self._http.delete(
            self._path(), {"id": id}, self._options()
        )
        return response.data

    async def rate_limits(self) -> dict[str, Any]:
        response = await self._http.get(
            self._path("/rate_limits"), options=self._options()
        )
        return response.data

    async def rate_limit_logs(self) -> dict[str, Any]:
        response = await self._http.get(
            self._path("/rate_limits/log"), options=self._options()
        )
        return response.data

    async def web3_token(self) -> str:
        """Fetch the token a wallet signs to create a web3 key."""
        response = await self._http.get(
            self._path("/generate_web3_key"), options=self._options()
        )
        body = response.data
        token = None
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            token = body["data"].get("token")
        if not isinstance(token, str) or not token:
            raise VeniceAPIError("Unexpected web3 token response", response.status)
        return token

    async def generate_web3_key(
        self,
        address: str,
        signature: str,
        token: str,
        description: str = DEFAULT_WEB3_KEY_DESCRIPTION,
        api_key_type: str = "INFERENCE",
        expires_at: str | None = None,
        consumption_limit: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create an API key authenticated by a signed wallet token."""
        self._require(address, "address")
        self._require(signature, "signature")
        self._require(token, "token")

        body: dict[str, Any] = {
            "address": address,
            "signature": signature,
            "token": token,
            "description": description,
            "apiKeyType": api_key_type,
        }
        if expires_at is not None:
            body["expiresAt"] = expires_at
        if consumption_limit is not None:
            body["consumptionLimit"] = consumption_limit

        response = await self._http.post(
            self._path("/generate_web3_key"), body, self._options()
        )
        return response.data
