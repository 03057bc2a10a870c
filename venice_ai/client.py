"""
Venice API client facade.

Wires one transport, one rate limiter and one error handler into the standard
and streaming clients, and exposes the resource wrappers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import structlog

from .config import ClientConfig, Configuration
from .events import ClientObserver
from .http.error_handler import ErrorHandler
from .http.middleware import Middleware, MiddlewareManager
from .http.standard import StandardHttpClient
from .http.streaming import StreamingHttpClient
from .logging_utils import configure_logging
from .rate_limiting.limiter import RateLimiter
from .resources import (
    APIKeysResource,
    AudioResource,
    BillingResource,
    CharactersResource,
    ChatResource,
    EmbeddingsResource,
    ImagesResource,
    ModelsResource,
    VVVResource,
)

logger = structlog.get_logger(__name__)


class VeniceClient:
    """
    Async client for the Venice AI API.

    Example:
        async with VeniceClient(ClientConfig(api_key=key)) as client:
            reply = await client.chat.create_completion(request)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        observer: ClientObserver | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or ClientConfig()
        self._owns_http_client = http_client is None
        self.http_client = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=self.config.timeout)
        )
        self.rate_limiter = RateLimiter(self.config.rate_limit_config())
        self.error_handler = ErrorHandler()
        self.middleware = MiddlewareManager()

        shared: dict[str, Any] = {
            "base_url": self.config.base_url,
            "timeout": self.config.timeout,
            "http_client": self.http_client,
            "rate_limiter": self.rate_limiter,
            "error_handler": self.error_handler,
            "observer": observer,
        }
        self.http = StandardHttpClient(
            self.config.api_key, middleware=self.middleware, **shared
        )
        self.streaming = StreamingHttpClient(self.config.api_key, **shared)

        self.chat = ChatResource(self.http, self.streaming)
        self.embeddings = EmbeddingsResource(self.http)
        self.audio = AudioResource(self.http)
        self.images = ImagesResource(self.http)
        self.models = ModelsResource(self.http)
        self.api_keys = APIKeysResource(self.http, self.config.admin_api_key)
        self.characters = CharactersResource(self.http)
        self.vvv = VVVResource(self.http)
        self.billing = BillingResource(self.http)

        logger.debug(
            "Venice client initialized",
            base_url=self.config.base_url,
            max_concurrent=self.config.max_concurrent,
            requests_per_minute=self.config.requests_per_minute,
        )

    @classmethod
    def from_env(
        cls,
        config_path: str | Path | None = None,
        *,
        require_api_key: bool = True,
        **kwargs: Any,
    ) -> VeniceClient:
        """
        Build a client from .env, config.yaml and environment variables.

        Also configures structlog at the resolved log level.
        """
        client_config = Configuration(config_path).get_client_config(require_api_key)
        configure_logging(client_config.log_level)
        return cls(client_config, **kwargs)

    def set_api_key(self, api_key: str) -> None:
        """Use a new API key for requests dispatched from now on."""
        self.http.set_auth_token(api_key)
        self.streaming.set_auth_token(api_key)

    def set_header(self, name: str, value: str) -> None:
        self.http.set_header(name, value)
        self.streaming.set_header(name, value)

    def remove_header(self, name: str) -> None:
        self.http.remove_header(name)
        self.streaming.remove_header(name)

    def use(self, middleware: Middleware) -> VeniceClient:
        self.middleware.use(middleware)
        return self

    def remove_middleware(self, name: str) -> bool:
        return self.middleware.remove(name)

    def clear_middlewares(self) -> None:
        self.middleware.clear()

    def get_statistics(self) -> dict[str, Any]:
        return {
            "base_url": self.config.base_url,
            "middlewares": [m.name for m in self.middleware.middlewares],
            **self.rate_limiter.get_statistics(),
        }

    async def aclose(self) -> None:
        await self.rate_limiter.aclose()
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> VeniceClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
