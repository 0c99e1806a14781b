"""Request executor for the Crawl4AI HTTP API.

This module performs one logical upstream call per ``execute``: a cache
lookup for read-mostly operations, then the HTTP request with bounded
exponential backoff on retryable failures, then a cache update.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from crawl4ai_mcp.core.config import Settings
from crawl4ai_mcp.core.operations import Operation
from crawl4ai_mcp.resilience.errors import ErrorClassifier, ParameterValidationError
from crawl4ai_mcp.resilience.retry import RetryPolicy
from crawl4ai_mcp.storage.response_cache import ResponseCache, make_cache_key

logger = logging.getLogger(__name__)

USER_AGENT = "crawl4ai-mcp/0.1.0"


class RequestExecutor:
    """Execute upstream calls with caching, retries and error classification.

    Attributes:
        endpoint_url: Base URL for the Crawl4AI service.

    Example:
        >>> executor = RequestExecutor(endpoint_url="http://localhost:11235")
        >>> payload = await executor.execute(Operation.SCRAPE, {"url": "https://example.com"})
        >>> await executor.close()
    """

    def __init__(
        self,
        endpoint_url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        retry_policy: RetryPolicy | None = None,
        cache: ResponseCache | None = None,
        classifier: ErrorClassifier | None = None,
        cache_ttl: float | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            endpoint_url: Base URL for the Crawl4AI service.
            api_key: Optional bearer token sent as ``Authorization`` header.
            timeout: Per-attempt request timeout in seconds.
            retry_policy: Backoff policy (default: 3 retries, 1s/2s/4s).
            cache: Response cache for cacheable operations. ``None`` disables
                caching entirely.
            classifier: Error classifier (default: production mode).
            cache_ttl: Lifetime of cached entries; the cache default when None.
        """
        self.endpoint_url = endpoint_url.rstrip("/")
        headers = {"Content-Type": "application/json", "User-Agent": USER_AGENT}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.endpoint_url, headers=headers, timeout=timeout
        )
        self._retry_policy = retry_policy or RetryPolicy()
        self._cache = cache
        self._classifier = classifier or ErrorClassifier()
        self._cache_ttl = cache_ttl

    @classmethod
    def from_settings(
        cls, settings: Settings, cache: ResponseCache | None = None
    ) -> RequestExecutor:
        """Build an executor from bridge settings.

        Args:
            settings: Loaded bridge configuration.
            cache: Optional shared cache; a new one sized from settings otherwise.

        Returns:
            Configured RequestExecutor.
        """
        return cls(
            endpoint_url=settings.crawl4ai_base_url,
            api_key=settings.crawl4ai_api_key,
            timeout=settings.request_timeout,
            retry_policy=RetryPolicy(
                max_retries=settings.max_retries,
                initial_delay=settings.retry_initial_delay,
                backoff_factor=settings.retry_backoff_factor,
                max_delay=settings.retry_max_delay,
            ),
            cache=cache
            or ResponseCache(
                capacity=settings.cache_max_entries,
                default_ttl=settings.cache_ttl_seconds,
            ),
            classifier=ErrorClassifier(settings.environment),
            cache_ttl=settings.cache_ttl_seconds,
        )

    @property
    def cache(self) -> ResponseCache | None:
        return self._cache

    async def execute(self, operation: Operation, params: Mapping[str, Any]) -> Any:
        """Perform one logical upstream call.

        Args:
            operation: Operation to invoke.
            params: Transcoded (snake_case) parameters. Values named in the
                operation's path template are substituted into the path; the
                rest become the JSON body (POST) or query string (GET).

        Returns:
            Decoded upstream payload; an empty body becomes ``{}``.

        Raises:
            ClassifiedError: On validation failure, non-retryable failure or
                exhausted retry budget.
        """
        cache_key = None
        if operation.cacheable and self._cache is not None:
            cache_key = make_cache_key(operation, params)
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug(
                    "Cache hit for %s", operation.value, extra={"operation": operation.value}
                )
                return cached

        path, remainder = self._resolve_path(operation, params)
        context = f"API {operation.method} {path}"

        payload = await self._retry_policy.execute_async(
            lambda: self._send(operation.method, path, remainder),
            lambda exc: self._classifier.classify(exc, context),
            operation_name=operation.value,
        )

        if cache_key is not None and self._cache is not None:
            self._cache.set(cache_key, payload, self._cache_ttl)
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> RequestExecutor:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager and cleanup resources."""
        await self.close()

    def _resolve_path(
        self, operation: Operation, params: Mapping[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Fill the operation's path template from the parameters.

        Raises:
            ClassifiedError: If a path parameter is missing.
        """
        remainder = dict(params)
        values: dict[str, str] = {}
        for field in operation.path_fields:
            value = remainder.pop(field, None)
            if value is None or value == "":
                raise self._classifier.classify(
                    ParameterValidationError(f"{field} is required"),
                    f"API {operation.method} {operation.path}",
                )
            values[field] = quote(str(value), safe="")
        return operation.path.format(**values), remainder

    async def _send(self, method: str, path: str, params: dict[str, Any]) -> Any:
        logger.info("%s %s", method, path, extra={"method": method, "path": path})
        if method == "GET":
            response = await self._client.get(path, params=_query_params(params))
        else:
            response = await self._client.post(path, json=params)
        response.raise_for_status()
        return _decode_body(response)


def _query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Encode a parameter bag for a query string.

    Nested mappings are sent as JSON; ``None`` values are omitted.
    """
    query: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        query[key] = json.dumps(value) if isinstance(value, Mapping) else value
    return query


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        data = response.text
    return data or {}
