"""Crawl4AI tool declarations and the dispatcher that invokes them.

The dispatcher is the inbound surface used by the MCP transport: it takes a
tool name and raw parameters and always answers with ``{"content": [...]}``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from crawl4ai_mcp.bridge.handler_factory import (
    Handler,
    HandlerOptions,
    create_handler,
    list_validator,
    string_validator,
)
from crawl4ai_mcp.bridge.schemas import (
    CheckCrawlStatusParams,
    CrawlParams,
    DeepResearchParams,
    ExtractParams,
    MapParams,
    ScrapeParams,
    SearchParams,
    ToolParams,
)
from crawl4ai_mcp.core.config import Settings
from crawl4ai_mcp.core.interfaces import UpstreamClient
from crawl4ai_mcp.core.operations import Operation
from crawl4ai_mcp.processing.normalizer import ContentBlock, text_block
from crawl4ai_mcp.resilience.errors import ClassifiedError, ErrorClassifier
from crawl4ai_mcp.services.client import Crawl4AIClient
from crawl4ai_mcp.services.executor import RequestExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDeclaration:
    """A named tool bound to one operation, its parameter model and handler options."""

    name: str
    operation: Operation
    description: str
    params_model: type[ToolParams]
    options: HandlerOptions = field(default_factory=HandlerOptions)


def _research_error_payload(params: Mapping[str, Any], error: ClassifiedError) -> dict[str, Any]:
    return {
        "query": params.get("query"),
        "success": False,
        "results": {"summary": "", "sources": []},
        "error": f"Deep research failed: {error.message}",
    }


TOOLS: tuple[ToolDeclaration, ...] = (
    ToolDeclaration(
        "crawl4ai_scrape",
        Operation.SCRAPE,
        "Scrape a single webpage with advanced options for content extraction. "
        "Supports markdown, HTML and screenshots, and can run actions such as "
        "clicking or scrolling before scraping.",
        ScrapeParams,
        HandlerOptions(
            validate_params=string_validator("url", "URL is required and must be a string"),
            error_context=lambda p: f"Error scraping {p.get('url')}",
        ),
    ),
    ToolDeclaration(
        "crawl4ai_crawl",
        Operation.CRAWL,
        "Start an asynchronous crawl of multiple pages from a starting URL. "
        "Supports depth control, path filtering and webhook notifications.",
        CrawlParams,
        HandlerOptions(
            validate_params=string_validator("url", "URL is required and must be a string"),
            empty_response_message=lambda p: f"Crawl could not be started from {p.get('url')}.",
            error_context=lambda p: f"Error starting crawl from {p.get('url')}",
        ),
    ),
    ToolDeclaration(
        "crawl4ai_map",
        Operation.MAP,
        "Discover URLs from a starting point using sitemap.xml and HTML link discovery.",
        MapParams,
        HandlerOptions(
            validate_params=string_validator("url", "URL is required and must be a string"),
            empty_response_message=lambda p: f"No URLs were discovered from {p.get('url')}.",
            error_context=lambda p: f"Error mapping URLs from {p.get('url')}",
        ),
    ),
    ToolDeclaration(
        "crawl4ai_extract",
        Operation.EXTRACT,
        "Extract structured information from web pages using an LLM.",
        ExtractParams,
        HandlerOptions(
            validate_params=list_validator("urls", "URLs are required and must be an array"),
            empty_response_message=lambda p: "No data could be extracted from the provided URLs.",
            error_context=lambda p: "Error extracting data",
        ),
    ),
    ToolDeclaration(
        "crawl4ai_check_crawl_status",
        Operation.CHECK_STATUS,
        "Check the status of a crawl job.",
        CheckCrawlStatusParams,
        HandlerOptions(
            validate_params=string_validator("id", "Crawl ID is required and must be a string"),
            empty_response_message=lambda p: f"No status was returned for crawl job {p.get('id')}.",
            error_context=lambda p: f"Error checking crawl status for job {p.get('id')}",
        ),
    ),
    ToolDeclaration(
        "crawl4ai_search",
        Operation.SEARCH,
        "Search the web and optionally scrape the results.",
        SearchParams,
        HandlerOptions(
            validate_params=string_validator(
                "query", "Search query is required and must be a string"
            ),
            empty_response_message=lambda p: f'No results found for query "{p.get("query")}".',
            error_context=lambda p: f'Error searching for "{p.get("query")}"',
        ),
    ),
    ToolDeclaration(
        "crawl4ai_deep_research",
        Operation.DEEP_RESEARCH,
        "Conduct deep research on a query using web crawling, search and AI analysis.",
        DeepResearchParams,
        HandlerOptions(
            validate_params=string_validator(
                "query", "Research query is required and must be a string"
            ),
            empty_response_message=lambda p: (
                f'No research results were returned for "{p.get("query")}".'
            ),
            error_context=lambda p: f'Error researching "{p.get("query")}"',
            error_payload=_research_error_payload,
        ),
    ),
)


def build_handlers(
    client: UpstreamClient, classifier: ErrorClassifier | None = None
) -> dict[str, Handler]:
    """Create one handler per declared tool, keyed by tool name."""
    return {
        tool.name: create_handler(client, tool.operation, tool.options, classifier)
        for tool in TOOLS
    }


class ToolDispatcher:
    """Route tool calls to their handlers.

    Parameters are validated against the tool's model, numeric limits are
    clamped to the configured maxima, and the handler result is wrapped in an
    MCP content response. ``call`` never raises.

    Args:
        settings: Bridge configuration supplying the limits
        client: Upstream client backing the handlers
        classifier: Classifier for schema failures and handler errors
    """

    def __init__(
        self,
        settings: Settings,
        client: UpstreamClient,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self.settings = settings
        self._client = client
        self._classifier = classifier or ErrorClassifier(settings.environment)
        self._handlers = build_handlers(client, self._classifier)
        self._tools: dict[str, ToolDeclaration] = {}
        for tool in TOOLS:
            self._tools[tool.name] = tool
            self._tools[tool.operation.value] = tool

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe each tool with its camelCase JSON input schema."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.params_model.model_json_schema(by_alias=True),
            }
            for tool in TOOLS
        ]

    def get_tool(self, name: str) -> ToolDeclaration | None:
        """Look a tool up by tool name (``crawl4ai_scrape``) or operation (``scrape``)."""
        return self._tools.get(name)

    async def call(
        self, name: str, parameters: Mapping[str, Any] | None = None
    ) -> dict[str, list[dict[str, str]]]:
        """Invoke a tool.

        Args:
            name: Tool or operation name
            parameters: Raw camelCase parameters from the caller

        Returns:
            ``{"content": [{"type": ..., "text": ...}, ...]}``
        """
        tool = self.get_tool(name)
        if tool is None:
            logger.warning("Unknown tool requested: %s", name, extra={"tool": name})
            return _response([text_block(f"Unknown tool: {name}")])

        try:
            model = tool.params_model.model_validate(dict(parameters or {}))
        except ValidationError as exc:
            error = self._classifier.classify(exc, f"Invalid parameters for {tool.name}")
            logger.info("%s", error.message, extra={"tool": tool.name, "kind": error.kind.value})
            return _response([text_block(error.message)])

        params = self._clamp(model.to_params())
        logger.info("Calling %s", tool.name, extra={"tool": tool.name})
        blocks = await self._handlers[tool.name](params)
        return _response(blocks)

    async def close(self) -> None:
        if isinstance(self._client, Crawl4AIClient):
            await self._client.close()

    async def __aenter__(self) -> ToolDispatcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _clamp(self, params: dict[str, Any]) -> dict[str, Any]:
        limits = {
            "maxDepth": self.settings.max_crawl_depth,
            "limit": self.settings.max_crawl_pages,
            "timeout": self.settings.max_timeout_ms,
        }
        clamped = dict(params)
        for key, maximum in limits.items():
            value = clamped.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                clamped[key] = min(value, maximum)
        return clamped


def _response(blocks: list[ContentBlock]) -> dict[str, list[dict[str, str]]]:
    return {"content": [block.to_dict() for block in blocks]}


def create_dispatcher(settings: Settings | None = None) -> ToolDispatcher:
    """Build a dispatcher backed by a live Crawl4AI client.

    Args:
        settings: Bridge configuration; loaded from the environment when omitted

    Returns:
        ToolDispatcher owning its HTTP client; close it when done
    """
    settings = settings or Settings()
    classifier = ErrorClassifier(settings.environment)
    executor = RequestExecutor.from_settings(settings)
    client = Crawl4AIClient(executor, classifier)
    return ToolDispatcher(settings, client, classifier)
