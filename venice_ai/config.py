"""Configuration management for the Venice SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import yaml
from dotenv import load_dotenv

from .models import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .rate_limiting.models import RateLimitConfig

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")

API_KEY_ENV = "VENICE_API_KEY"
ADMIN_API_KEY_ENV = "VENICE_ADMIN_API_KEY"
BASE_URL_ENV = "VENICE_BASE_URL"
TIMEOUT_ENV = "VENICE_TIMEOUT"
MAX_CONCURRENT_ENV = "VENICE_MAX_CONCURRENT"
REQUESTS_PER_MINUTE_ENV = "VENICE_REQUESTS_PER_MINUTE"
LOG_LEVEL_ENV = "VENICE_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ClientConfig:
    """Everything a ``VeniceClient`` needs. No environment access."""
    api_key: str | None = None
    admin_api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_concurrent: int = 5
    requests_per_minute: int = 60
    window_seconds: float = 60.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{self.base_url}'")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        # Delegates max_concurrent / requests_per_minute / window checks
        self.rate_limit_config()

    def rate_limit_config(self) -> RateLimitConfig:
        return RateLimitConfig(
            max_concurrent=self.max_concurrent,
            requests_per_minute=self.requests_per_minute,
            window_seconds=self.window_seconds,
        )


class Configuration:
    """Loads SDK settings from .env, YAML and environment variables."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        """
        Initialize configuration.

        Args:
            config_path: YAML file to read. Defaults to the packaged config.yaml.
        """
        self.load_env()
        self._config = self._load_yaml_config(
            Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        )

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(path: Path) -> dict[str, Any]:
        with open(path) as file:
            config = yaml.safe_load(file)
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Config file must be YAML dict, got {type(config)}")
        return config

    def _section(self, name: str) -> dict[str, Any]:
        section = self._config.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'{name}' section in config.yaml must be a mapping")
        return section

    @property
    def api_key(self) -> str:
        """Get the Venice API key.

        Raises:
            ValueError: If VENICE_API_KEY is not set.
        """
        api_key = os.getenv(API_KEY_ENV)
        if not api_key:
            raise ValueError(
                f"API key '{API_KEY_ENV}' not found in environment variables"
            )
        return api_key

    @property
    def admin_api_key(self) -> str | None:
        return os.getenv(ADMIN_API_KEY_ENV) or None

    def get_log_level(self) -> str:
        level = os.getenv(LOG_LEVEL_ENV) or self._section("logging").get(
            "level", "INFO"
        )
        return str(level).upper()

    def get_client_config(self, require_api_key: bool = False) -> ClientConfig:
        """Build a ``ClientConfig``; environment values win over YAML.

        Raises:
            ValueError: If a value is invalid, naming the offending key, or if
                the API key is missing while ``require_api_key`` is set.
        """
        venice = self._section("venice")
        limits = self._section("rate_limiting")

        api_key = self.api_key if require_api_key else os.getenv(API_KEY_ENV) or None
        return ClientConfig(
            api_key=api_key,
            admin_api_key=self.admin_api_key,
            base_url=(
                os.getenv(BASE_URL_ENV) or venice.get("base_url", DEFAULT_BASE_URL)
            ),
            timeout=_number(
                TIMEOUT_ENV,
                "venice.timeout",
                venice.get("timeout", DEFAULT_TIMEOUT),
                float,
            ),
            max_concurrent=_number(
                MAX_CONCURRENT_ENV,
                "rate_limiting.max_concurrent",
                limits.get("max_concurrent", 5),
                int,
            ),
            requests_per_minute=_number(
                REQUESTS_PER_MINUTE_ENV,
                "rate_limiting.requests_per_minute",
                limits.get("requests_per_minute", 60),
                int,
            ),
            window_seconds=_number(
                None,
                "rate_limiting.window_seconds",
                limits.get("window_seconds", 60.0),
                float,
            ),
            log_level=self.get_log_level(),
        )


N = TypeVar("N", int, float)


def _number(
    env_name: str | None, yaml_key: str, default: Any, cast: type[N]
) -> N:
    raw = os.getenv(env_name) if env_name else None
    source = env_name if raw else yaml_key
    value = raw if raw else default
    if isinstance(value, bool):
        raise ValueError(f"{source} must be a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{source} must be a number, got {value!r}") from e
