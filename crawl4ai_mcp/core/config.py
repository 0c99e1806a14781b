"""Configuration module for the Crawl4AI MCP bridge.

Provides Pydantic-based configuration management with environment variable support
and field validation.

Example:
    >>> from crawl4ai_mcp.core.config import Settings
    >>> settings = Settings(crawl4ai_api_key="secret")
    >>> print(settings.crawl4ai_base_url)
    'http://localhost:11235'  # Host URL
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_in_docker() -> bool:
    """Detect if code is running inside a Docker container.

    Checks for Docker-specific files and environment markers.

    Returns:
        True if running inside Docker container, False otherwise.
    """
    if Path("/.dockerenv").exists():
        return True

    try:
        with Path("/proc/1/cgroup").open() as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass

    return os.getenv("RUN_IN_DOCKER", "").lower() in ("true", "1", "yes")


class ExecutionMode(str, Enum):
    """Controls how much diagnostic detail error responses carry."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class Settings(BaseSettings):
    """Bridge configuration.

    Environment-aware configuration that automatically uses:
    - Docker network URL for Crawl4AI when running inside containers
    - Localhost URL when running on the host machine

    Attributes:
        crawl4ai_base_url: Crawl4AI service URL
        crawl4ai_api_key: Optional bearer token for the Crawl4AI API
        request_timeout: Per-attempt HTTP timeout in seconds
        max_retries: Retries after the first attempt for retryable failures
        retry_initial_delay: Backoff delay before the first retry, in seconds
        retry_backoff_factor: Multiplier applied to the delay for each retry
        retry_max_delay: Upper bound for any single backoff delay, in seconds
        cache_ttl_seconds: Lifetime of cached responses
        cache_max_entries: Maximum number of cached responses
        environment: production (terse error details) or development
        max_crawl_depth: Ceiling applied to caller-supplied maxDepth
        max_crawl_pages: Ceiling applied to caller-supplied limit
        max_timeout_ms: Ceiling applied to caller-supplied timeout
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to the rotating log file

    Raises:
        ValidationError: If values are invalid

    Example:
        >>> settings = Settings(max_retries=5, environment="development")
        >>> settings.is_development
        True
    """

    # Upstream service (base URL set by model_validator based on environment)
    crawl4ai_base_url: str = ""
    crawl4ai_api_key: str | None = None
    request_timeout: float = 60.0

    # Retry policy
    max_retries: int = 3
    retry_initial_delay: float = 1.0
    retry_backoff_factor: float = 2.0
    retry_max_delay: float = 10.0

    # Response cache
    cache_ttl_seconds: float = 300.0
    cache_max_entries: int = 100

    # Error detail verbosity
    environment: ExecutionMode = ExecutionMode.PRODUCTION

    # Caller limits
    max_crawl_depth: int = 10
    max_crawl_pages: int = 1000
    max_timeout_ms: int = 120_000

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path(".cache/crawl4ai_mcp.log")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.environment is ExecutionMode.DEVELOPMENT

    @model_validator(mode="after")
    def set_environment_aware_defaults(self) -> "Settings":
        """Set the Crawl4AI URL based on environment if not explicitly configured.

        Returns:
            Settings instance with environment-aware URL.
        """
        if not self.crawl4ai_base_url:
            self.crawl4ai_base_url = (
                "http://crawl4ai:11235"
                if is_running_in_docker()
                else "http://localhost:11235"
            )
        self.crawl4ai_base_url = self.crawl4ai_base_url.rstrip("/")
        return self

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls: type["Settings"], v: int) -> int:
        """Validate max_retries is not negative.

        Zero disables retrying; the first failure is then final.

        Raises:
            ValueError: If max_retries is negative
        """
        if v < 0:
            raise ValueError("max_retries must not be negative")
        return v

    @field_validator(
        "request_timeout",
        "retry_initial_delay",
        "retry_max_delay",
        "cache_ttl_seconds",
    )
    @classmethod
    def validate_positive_seconds(cls: type["Settings"], v: float) -> float:
        """Validate durations are positive.

        Raises:
            ValueError: If the duration is zero or negative
        """
        if v <= 0:
            raise ValueError("durations must be positive")
        return v

    @field_validator("retry_backoff_factor")
    @classmethod
    def validate_backoff_factor(cls: type["Settings"], v: float) -> float:
        """Validate the backoff factor never shrinks delays.

        Raises:
            ValueError: If retry_backoff_factor is below 1
        """
        if v < 1:
            raise ValueError("retry_backoff_factor must be at least 1")
        return v

    @field_validator(
        "cache_max_entries", "max_crawl_depth", "max_crawl_pages", "max_timeout_ms"
    )
    @classmethod
    def validate_positive_count(cls: type["Settings"], v: int) -> int:
        """Validate capacities and limits are positive.

        Raises:
            ValueError: If the value is not positive
        """
        if v <= 0:
            raise ValueError("limits must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls: type["Settings"], v: str) -> str:
        """Normalize and validate the log level name.

        Raises:
            ValueError: If log_level is not a standard level name
        """
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log_level: {v}")
        return level
