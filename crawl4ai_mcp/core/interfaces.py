"""Core protocol definitions for crawl4ai_mcp components.

This module provides the capability interface the handler factory depends on.
Any object exposing these coroutine methods can back the tools, which keeps
the factory testable with simple fakes.
"""

from typing import Any, Protocol


class UpstreamClient(Protocol):
    """Protocol defining one typed method per upstream operation.

    Implemented by Crawl4AIClient. Every method takes the operation's primary
    argument positionally and the remaining camelCase options as a mapping,
    and returns the raw upstream payload.

    Methods raise ClassifiedError on failure.
    """

    async def scrape(self, url: str, options: dict[str, Any]) -> Any:
        """Scrape a single page."""
        ...

    async def crawl(self, url: str, options: dict[str, Any]) -> Any:
        """Start an asynchronous crawl job."""
        ...

    async def map_urls(self, url: str, options: dict[str, Any]) -> Any:
        """Discover URLs reachable from a starting page."""
        ...

    async def extract(self, urls: list[str], options: dict[str, Any]) -> Any:
        """Extract structured data from one or more pages."""
        ...

    async def check_crawl_status(self, job_id: str, options: dict[str, Any]) -> Any:
        """Fetch the status of a crawl job."""
        ...

    async def search(self, query: str, options: dict[str, Any]) -> Any:
        """Search the web."""
        ...

    async def deep_research(self, query: str, options: dict[str, Any]) -> Any:
        """Run a multi-page research job."""
        ...
