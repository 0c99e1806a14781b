"""Service layer for Crawl4AI upstream calls."""

from crawl4ai_mcp.services.client import Crawl4AIClient
from crawl4ai_mcp.services.executor import RequestExecutor

__all__ = [
    "Crawl4AIClient",
    "RequestExecutor",
]
