"""
Tests for configuration loading and precedence.
"""

import pytest

from venice_ai import config as config_module
from venice_ai.config import (
    ADMIN_API_KEY_ENV,
    API_KEY_ENV,
    BASE_URL_ENV,
    LOG_LEVEL_ENV,
    MAX_CONCURRENT_ENV,
    REQUESTS_PER_MINUTE_ENV,
    TIMEOUT_ENV,
    ClientConfig,
    Configuration,
)

ALL_ENV = (
    API_KEY_ENV,
    ADMIN_API_KEY_ENV,
    BASE_URL_ENV,
    TIMEOUT_ENV,
    MAX_CONCURRENT_ENV,
    REQUESTS_PER_MINUTE_ENV,
    LOG_LEVEL_ENV,
)

YAML_CONFIG = """
venice:
  base_url: "https://yaml.example/api/v1"
  timeout: 12.5
rate_limiting:
  max_concurrent: 2
  requests_per_minute: 30
  window_seconds: 10
logging:
  level: "debug"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the real environment and any .env file."""
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    for name in ALL_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def yaml_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML_CONFIG)
    return path


class TestDefaults:
    """The packaged config.yaml."""

    def test_packaged_defaults(self):
        client_config = Configuration().get_client_config()

        assert client_config.base_url == "https://api.venice.ai/api/v1"
        assert client_config.timeout == 30.0
        assert client_config.max_concurrent == 5
        assert client_config.requests_per_minute == 60
        assert client_config.api_key is None
        assert client_config.log_level == "INFO"

    def test_dotenv_loaded_on_init(self, monkeypatch):
        calls = []
        monkeypatch.setattr(config_module, "load_dotenv", lambda: calls.append(1))

        Configuration()

        assert calls == [1]


class TestPrecedence:
    """Environment variables win over YAML."""

    def test_yaml_values(self, yaml_path):
        client_config = Configuration(yaml_path).get_client_config()

        assert client_config.base_url == "https://yaml.example/api/v1"
        assert client_config.timeout == 12.5
        assert client_config.max_concurrent == 2
        assert client_config.requests_per_minute == 30
        assert client_config.window_seconds == 10.0
        assert client_config.log_level == "DEBUG"

    def test_environment_overrides_yaml(self, yaml_path, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        monkeypatch.setenv(ADMIN_API_KEY_ENV, "admin-key")
        monkeypatch.setenv(BASE_URL_ENV, "https://env.example/api/v1")
        monkeypatch.setenv(TIMEOUT_ENV, "5")
        monkeypatch.setenv(MAX_CONCURRENT_ENV, "8")
        monkeypatch.setenv(REQUESTS_PER_MINUTE_ENV, "120")
        monkeypatch.setenv(LOG_LEVEL_ENV, "warning")

        client_config = Configuration(yaml_path).get_client_config()

        assert client_config.api_key == "env-key"
        assert client_config.admin_api_key == "admin-key"
        assert client_config.base_url == "https://env.example/api/v1"
        assert client_config.timeout == 5.0
        assert client_config.max_concurrent == 8
        assert client_config.requests_per_minute == 120
        assert client_config.log_level == "WARNING"

    def test_invalid_environment_value_names_the_variable(self, monkeypatch):
        monkeypatch.setenv(MAX_CONCURRENT_ENV, "many")

        with pytest.raises(ValueError, match=MAX_CONCURRENT_ENV):
            Configuration().get_client_config()

    def test_invalid_yaml_value_names_the_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("venice:\n  timeout: soon\n")

        with pytest.raises(ValueError, match="venice.timeout"):
            Configuration(path).get_client_config()


class TestApiKey:
    """API key lookup."""

    def test_required_key_missing(self):
        with pytest.raises(ValueError, match=API_KEY_ENV):
            Configuration().get_client_config(require_api_key=True)

    def test_required_key_present(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "k")

        assert Configuration().get_client_config(require_api_key=True).api_key == "k"


class TestYamlShape:
    """Malformed YAML files."""

    def test_non_mapping_file_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="YAML dict"):
            Configuration(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        client_config = Configuration(path).get_client_config()

        assert client_config.timeout == 30.0

    def test_non_mapping_section_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("venice: 3\n")

        with pytest.raises(ValueError, match="venice"):
            Configuration(path).get_client_config()


class TestClientConfig:
    """Validation of the resolved settings."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_url": "ftp://api.venice.ai"},
            {"timeout": 0},
            {"log_level": "LOUD"},
            {"max_concurrent": 0},
            {"requests_per_minute": -1},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**kwargs)

    def test_rate_limit_config(self):
        client_config = ClientConfig(max_concurrent=3, requests_per_minute=9)
        limits = client_config.rate_limit_config()

        assert limits.max_concurrent == 3
        assert limits.requests_per_minute == 9
