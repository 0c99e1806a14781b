"""Typed Crawl4AI client built on the request executor.

Each method checks its primary argument, merges it with the caller's
camelCase options, transcodes the bag to snake_case and hands it to the
executor. Payloads are returned raw; formatting is left to the normalizer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from crawl4ai_mcp.core.operations import Operation
from crawl4ai_mcp.core.transcoder import transcode
from crawl4ai_mcp.resilience.errors import ErrorClassifier, ParameterValidationError
from crawl4ai_mcp.services.executor import RequestExecutor


class Crawl4AIClient:
    """Client exposing one coroutine per Crawl4AI operation.

    Satisfies the ``UpstreamClient`` protocol.

    Example:
        >>> async with RequestExecutor("http://localhost:11235") as executor:
        ...     client = Crawl4AIClient(executor)
        ...     page = await client.scrape("https://example.com", {"formats": ["markdown"]})
    """

    def __init__(
        self, executor: RequestExecutor, classifier: ErrorClassifier | None = None
    ) -> None:
        self._executor = executor
        self._classifier = classifier or ErrorClassifier()

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def scrape(self, url: str, options: Mapping[str, Any]) -> Any:
        """Scrape a single page.

        Raises:
            ClassifiedError: VALIDATION when ``url`` is empty, otherwise as
                raised by the executor.
        """
        self._require(url, "URL is required for scraping")
        return await self._call(Operation.SCRAPE, "url", url, options)

    async def crawl(self, url: str, options: Mapping[str, Any]) -> Any:
        """Start an asynchronous crawl job; the payload carries its ``id``."""
        self._require(url, "URL is required for crawling")
        return await self._call(Operation.CRAWL, "url", url, options)

    async def map_urls(self, url: str, options: Mapping[str, Any]) -> Any:
        self._require(url, "URL is required for URL mapping")
        return await self._call(Operation.MAP, "url", url, options)

    async def extract(self, urls: list[str], options: Mapping[str, Any]) -> Any:
        """Extract structured data from one or more pages."""
        self._require(urls, "At least one URL is required for extraction")
        return await self._call(Operation.EXTRACT, "urls", list(urls), options)

    async def check_crawl_status(self, job_id: str, options: Mapping[str, Any]) -> Any:
        self._require(job_id, "Crawl ID is required to check status")
        return await self._call(Operation.CHECK_STATUS, "id", job_id, options)

    async def search(self, query: str, options: Mapping[str, Any]) -> Any:
        self._require(query, "Search query is required")
        return await self._call(Operation.SEARCH, "query", query, options)

    async def deep_research(self, query: str, options: Mapping[str, Any]) -> Any:
        """Run a multi-page research job and return its summary and sources."""
        self._require(query, "Query is required for deep research")
        return await self._call(Operation.DEEP_RESEARCH, "query", query, options)

    async def close(self) -> None:
        await self._executor.close()

    def _require(self, value: Any, message: str) -> None:
        if not value:
            raise self._classifier.classify(ParameterValidationError(message))

    async def _call(
        self, operation: Operation, name: str, value: Any, options: Mapping[str, Any]
    ) -> Any:
        params = transcode({name: value, **options})
        return await self._executor.execute(operation, params)
