"""Shared pytest fixtures for unit tests."""

from collections.abc import AsyncIterator

import pytest

from crawl4ai_mcp.core.config import Settings
from crawl4ai_mcp.resilience.errors import ErrorClassifier
from crawl4ai_mcp.resilience.retry import RetryPolicy
from crawl4ai_mcp.services.client import Crawl4AIClient
from crawl4ai_mcp.services.executor import RequestExecutor
from crawl4ai_mcp.storage.response_cache import ResponseCache
from tests.fixtures.crawl4ai_responses import BASE_URL, RecordingSleep


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(_env_file=None, crawl4ai_base_url=BASE_URL)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry_policy(recording_sleep: RecordingSleep) -> RetryPolicy:
    """Default backoff policy that never actually sleeps."""
    return RetryPolicy(sleep=recording_sleep)


@pytest.fixture
async def executor(retry_policy: RetryPolicy) -> AsyncIterator[RequestExecutor]:
    async with RequestExecutor(
        endpoint_url=BASE_URL,
        api_key="test-key",
        retry_policy=retry_policy,
        cache=ResponseCache(capacity=10, default_ttl=60.0),
    ) as instance:
        yield instance


@pytest.fixture
def client(executor: RequestExecutor) -> Crawl4AIClient:
    return Crawl4AIClient(executor, ErrorClassifier())
