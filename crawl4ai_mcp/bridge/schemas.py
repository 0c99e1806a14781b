"""Parameter models for the Crawl4AI tools.

Tool callers use camelCase field names. Models accept both the alias and the
Python name, and ``to_params`` dumps back to camelCase with unset optional
fields omitted.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ScrapeFormat = Literal[
    "markdown", "html", "rawHtml", "screenshot", "links", "screenshot@fullPage", "extract"
]
CrawlFormat = Literal[
    "markdown", "html", "rawHtml", "screenshot", "links", "screenshot@fullPage"
]
ActionType = Literal[
    "wait", "click", "screenshot", "write", "press", "scroll", "scrape", "executeJavascript"
]


class ToolParams(BaseModel):
    """Base for tool parameter models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_params(self) -> dict[str, Any]:
        """Dump to a camelCase parameter bag without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Location(ToolParams):
    country: str | None = Field(default=None, description="Country code for geolocation")
    languages: list[str] | None = Field(
        default=None, description='Language codes for content (e.g., ["en", "fr"])'
    )


class ExtractConfig(ToolParams):
    prompt: str | None = Field(default=None, description="User prompt for LLM extraction")
    system_prompt: str | None = Field(
        default=None, description="System prompt for LLM extraction"
    )
    schema_: dict[str, Any] | None = Field(
        default=None,
        alias="schema",
        description="JSON schema for structured data extraction",
    )


class Action(ToolParams):
    type: ActionType
    selector: str | None = Field(default=None, description="CSS selector for the target element")
    milliseconds: int | None = Field(default=None, description="Time to wait in milliseconds")
    text: str | None = Field(default=None, description="Text to write")
    key: str | None = Field(default=None, description="Key to press")
    direction: Literal["up", "down"] | None = None
    full_page: bool | None = Field(default=None, description="Take full page screenshot")
    script: str | None = Field(default=None, description="JavaScript code to execute")


class ScrapeParams(ToolParams):
    url: str = Field(description="URL to process, including protocol")
    formats: list[ScrapeFormat] = Field(
        default_factory=lambda: ["markdown"], description="Content formats to extract"
    )
    actions: list[Action] | None = Field(
        default=None, description="Actions to perform before scraping"
    )
    wait_for: int | None = Field(default=None, description="Time to wait for dynamic content")
    only_main_content: bool | None = None
    include_tags: list[str] | None = None
    exclude_tags: list[str] | None = None
    mobile: bool | None = Field(default=None, description="Use mobile viewport")
    timeout: int | None = Field(
        default=None, ge=0, description="Maximum time in milliseconds to wait"
    )
    extract: ExtractConfig | None = None
    location: Location | None = None
    remove_base64_images: bool | None = None
    skip_tls_verification: bool | None = None


class CrawlScrapeOptions(ToolParams):
    formats: list[CrawlFormat] = Field(default_factory=lambda: ["markdown"])
    only_main_content: bool = True
    include_tags: list[str] | None = None
    exclude_tags: list[str] | None = None
    wait_for: int = 2000
    remove_base64_images: bool = True


class WebhookConfig(ToolParams):
    url: str
    headers: dict[str, str] = Field(default_factory=dict)


class CrawlParams(ToolParams):
    url: str = Field(description="Starting URL for the crawl")
    limit: int = Field(default=50, ge=1, le=1000, description="Maximum pages to crawl")
    max_depth: int = Field(default=3, ge=1, le=10, description="Maximum link depth")
    include_paths: list[str] | None = None
    exclude_paths: list[str] | None = None
    allow_external_links: bool = False
    allow_backward_links: bool = True
    ignore_query_parameters: bool = True
    deduplicate_similar_urls: bool = Field(default=True, alias="deduplicateSimilarURLs")
    ignore_sitemap: bool = False
    scrape_options: CrawlScrapeOptions | None = None
    webhook: str | WebhookConfig | None = Field(
        default=None, description="Webhook notified when the crawl is complete"
    )


class MapParams(ToolParams):
    url: str = Field(description="Starting URL for URL discovery")
    limit: int = Field(default=100, ge=1, le=500, description="Maximum URLs to return")
    search: str | None = Field(default=None, description="Search term to filter URLs")
    ignore_sitemap: bool = False
    sitemap_only: bool = False
    include_subdomains: bool = False
    max_depth: int = Field(default=2, ge=1, le=5)
    include_paths: list[str] | None = None
    exclude_paths: list[str] | None = None
    format: Literal["simple", "detailed"] = "simple"


class ExtractParams(ToolParams):
    urls: list[str] = Field(min_length=1, description="URLs to extract information from")
    schema_: dict[str, Any] | None = Field(
        default=None, alias="schema", description="JSON schema of the data to extract"
    )
    prompt: str | None = None
    system_prompt: str | None = None
    enable_web_search: bool = False
    allow_external_links: bool = False
    include_subdomains: bool = True
    max_depth: int = Field(default=1, ge=1, le=3)
    max_content_length: int = Field(default=50000, ge=1)
    use_cache: bool = True
    output_format: Literal["json", "markdown", "text"] = "json"


class CheckCrawlStatusParams(ToolParams):
    id: str = Field(description="ID of the crawl job to check")
    include_stats: bool = True
    include_urls: bool = True
    include_errors: bool = True
    download_results: bool = False
    download_format: Literal["json", "markdown", "csv"] = "json"
    max_result_size: int = Field(default=1000, ge=1, description="Maximum size in KB")
    cancel_if_running: bool = False


class SearchScrapeOptions(ToolParams):
    formats: list[Literal["markdown", "html", "rawHtml"]] | None = None
    only_main_content: bool | None = None
    wait_for: int | None = None


class SearchLocation(ToolParams):
    country: str
    languages: list[str] | None = None


class SearchParams(ToolParams):
    query: str = Field(description="Search query string")
    limit: int | None = Field(default=None, ge=1, description="Maximum results (default: 5)")
    filter: str | None = None
    country: str | None = None
    lang: str | None = None
    tbs: str | None = Field(default=None, description="Time-based search filter")
    scrape_options: SearchScrapeOptions | None = None
    location: SearchLocation | None = None


class DeepResearchParams(ToolParams):
    query: str = Field(description="Research query or topic to investigate")
    max_depth: int = Field(default=3, ge=1, le=10)
    max_urls: int = Field(default=20, ge=1, le=1000)
    time_limit: int = Field(default=120, ge=30, le=300, description="Seconds to spend")
    include_domains: list[str] | None = None
    exclude_domains: list[str] | None = None
    response_format: Literal["text", "markdown", "json"] = "markdown"
    system_instructions: str | None = None
    include_sources: bool = True
