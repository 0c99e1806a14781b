"""Unit tests for configuration module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from crawl4ai_mcp.core.config import ExecutionMode, Settings


class TestConfigLoading:
    """Test configuration loading from environment variables."""

    def test_config_loads_from_env(self) -> None:
        env_vars = {
            "CRAWL4AI_BASE_URL": "http://crawler.internal:8080/",
            "CRAWL4AI_API_KEY": "secret",
            "REQUEST_TIMEOUT": "15",
            "MAX_RETRIES": "5",
            "CACHE_TTL_SECONDS": "30",
            "CACHE_MAX_ENTRIES": "20",
            "ENVIRONMENT": "development",
            "MAX_CRAWL_DEPTH": "4",
            "LOG_LEVEL": "debug",
            "LOG_FILE": "/tmp/bridge.log",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.crawl4ai_base_url == "http://crawler.internal:8080"
        assert settings.crawl4ai_api_key == "secret"
        assert settings.request_timeout == 15.0
        assert settings.max_retries == 5
        assert settings.cache_ttl_seconds == 30.0
        assert settings.cache_max_entries == 20
        assert settings.environment is ExecutionMode.DEVELOPMENT
        assert settings.is_development is True
        assert settings.max_crawl_depth == 4
        assert settings.log_level == "DEBUG"
        assert settings.log_file == Path("/tmp/bridge.log")

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.crawl4ai_api_key is None
        assert settings.request_timeout == 60.0
        assert settings.max_retries == 3
        assert settings.retry_initial_delay == 1.0
        assert settings.retry_backoff_factor == 2.0
        assert settings.retry_max_delay == 10.0
        assert settings.cache_ttl_seconds == 300.0
        assert settings.cache_max_entries == 100
        assert settings.environment is ExecutionMode.PRODUCTION
        assert settings.max_crawl_pages == 1000
        assert settings.max_timeout_ms == 120_000


class TestEnvironmentAwareUrl:
    def test_localhost_on_host(self) -> None:
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("crawl4ai_mcp.core.config.is_running_in_docker", return_value=False),
        ):
            assert Settings(_env_file=None).crawl4ai_base_url == "http://localhost:11235"

    def test_service_name_in_docker(self) -> None:
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("crawl4ai_mcp.core.config.is_running_in_docker", return_value=True),
        ):
            assert Settings(_env_file=None).crawl4ai_base_url == "http://crawl4ai:11235"


class TestConfigValidation:
    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_retries", -1),
            ("request_timeout", 0),
            ("retry_initial_delay", -0.5),
            ("retry_backoff_factor", 0.5),
            ("cache_max_entries", 0),
            ("max_crawl_depth", 0),
            ("log_level", "LOUD"),
            ("environment", "staging"),
        ],
    )
    def test_rejects_invalid_values(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_zero_retries_allowed(self) -> None:
        assert Settings(_env_file=None, max_retries=0).max_retries == 0
