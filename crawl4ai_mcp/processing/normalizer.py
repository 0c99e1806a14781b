"""Convert raw Crawl4AI payloads into typed content blocks.

Payloads are matched against an ordered list of shape formatters. The first
formatter whose predicate matches and which renders at least one block wins;
anything left over is pretty-printed as JSON.

Example:
    >>> normalize({"urls": ["https://a.dev", "https://b.dev"]})[0].text
    '2 URLs discovered:\\n- https://a.dev\\n- https://b.dev'
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Crawl status previews list at most this many URLs or errors
PREVIEW_LIMIT = 10

NO_CONTENT_MESSAGE = "No content returned."


class ContentType(str, Enum):
    TEXT = "text"
    HTML = "html"
    JSON = "json"
    IMAGE = "image"


@dataclass(frozen=True)
class ContentBlock:
    """One typed output unit returned to the tool caller."""

    type: ContentType
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "text": self.text}


def text_block(text: str) -> ContentBlock:
    return ContentBlock(ContentType.TEXT, text)


def json_block(value: Any) -> ContentBlock:
    return ContentBlock(ContentType.JSON, _to_json(value))


@dataclass(frozen=True)
class ShapeFormatter:
    """A predicate and the renderer applied when it matches."""

    name: str
    matches: Callable[[Mapping[str, Any]], bool]
    render: Callable[[Mapping[str, Any]], list[ContentBlock]]


def normalize(payload: Any) -> list[ContentBlock]:
    """Convert an upstream payload into at least one content block.

    Args:
        payload: Decoded JSON value returned by the executor

    Returns:
        Non-empty list of content blocks. This function does not raise.
    """
    if _is_normalized(payload):
        return [_coerce_block(item) for item in payload]

    if payload is None:
        return [text_block(NO_CONTENT_MESSAGE)]
    if isinstance(payload, str):
        return [text_block(payload)]
    if isinstance(payload, bool):
        return [text_block("true" if payload else "false")]
    if not isinstance(payload, (Mapping, list, tuple)):
        return [text_block(str(payload))]

    if isinstance(payload, Mapping):
        for formatter in SHAPE_FORMATTERS:
            try:
                if not formatter.matches(payload):
                    continue
                blocks = formatter.render(payload)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning(
                    "Formatter %s could not render payload: %s",
                    formatter.name,
                    exc,
                    extra={"formatter": formatter.name},
                )
                continue
            if blocks:
                return blocks

    return [json_block(payload)]


def _is_normalized(payload: Any) -> bool:
    if not isinstance(payload, list) or not payload:
        return False
    return all(_looks_like_block(item) for item in payload)


def _looks_like_block(item: Any) -> bool:
    if isinstance(item, ContentBlock):
        return True
    if not isinstance(item, Mapping) or "type" not in item or "text" not in item:
        return False
    kind = item["type"]
    return isinstance(kind, str) and kind in {member.value for member in ContentType}


def _coerce_block(item: ContentBlock | Mapping[str, Any]) -> ContentBlock:
    if isinstance(item, ContentBlock):
        return item
    text = item["text"]
    return ContentBlock(ContentType(item["type"]), text if isinstance(text, str) else str(text))


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    except ValueError:
        # Circular references
        return repr(value)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _bullets(lines: list[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def _preview(items: list[Any], render: Callable[[Any], str]) -> str:
    shown = [render(item) for item in items[:PREVIEW_LIMIT]]
    text = _bullets(shown)
    hidden = len(items) - len(shown)
    if hidden > 0:
        text += f"\n... and {hidden} more"
    return text


# Research results


def _is_research(payload: Mapping[str, Any]) -> bool:
    results = payload.get("results")
    return (isinstance(results, str) and bool(results)) or (
        isinstance(results, Mapping) and bool(results.get("summary"))
    )


def _render_research(payload: Mapping[str, Any]) -> list[ContentBlock]:
    results = payload["results"]
    if isinstance(results, str):
        return [text_block(results)]

    blocks = [text_block(str(results["summary"]))]
    sources = results.get("sources")
    if isinstance(sources, list) and sources:
        blocks.append(text_block("\nSources:\n" + _bullets([_source_line(s) for s in sources])))
    return blocks


def _source_line(source: Any) -> str:
    if isinstance(source, Mapping):
        url = source.get("url") or ""
        title = source.get("title")
        return f"{url}: {title}" if title else str(url)
    return str(source)


# URL discovery


def _is_status(payload: Mapping[str, Any]) -> bool:
    return bool(payload.get("id")) and "status" in payload


def _is_url_list(payload: Mapping[str, Any]) -> bool:
    return isinstance(payload.get("urls"), list) and not _is_status(payload)


def _render_url_list(payload: Mapping[str, Any]) -> list[ContentBlock]:
    urls = [str(url) for url in payload["urls"]]
    header = _plural(len(urls), "URL") + " discovered:"
    return [text_block(f"{header}\n{_bullets(urls)}")]


# Search results


def _is_search(payload: Mapping[str, Any]) -> bool:
    return isinstance(payload.get("results"), list)


def _render_search(payload: Mapping[str, Any]) -> list[ContentBlock]:
    results = payload["results"]
    query = payload.get("query") or ""
    header = f'{_plural(len(results), "result")} for "{query}":\n\n'

    entries = []
    for index, result in enumerate(results, start=1):
        item = result if isinstance(result, Mapping) else {"url": str(result)}
        url = item.get("url") or ""
        title = item.get("title") or url or f"Result {index}"
        snippet = item.get("snippet") or item.get("description") or ""
        entries.append(f"{index}. **{title}**\n   {url}\n   {snippet}\n")
    return [text_block(header + "\n".join(entries))]


# Crawl job status


def _render_status(payload: Mapping[str, Any]) -> list[ContentBlock]:
    progress = payload.get("progress")
    lines = [
        f"Crawl Job: {payload['id']}",
        f"Status: {payload['status']}",
        f"Progress: {progress}%" if progress is not None else "Progress: unknown",
    ]
    if payload.get("urls_count") is not None:
        lines.append(f"URLs Crawled: {payload['urls_count']}")
    if payload.get("errors_count") is not None:
        lines.append(f"Errors: {payload['errors_count']}")
    blocks = [text_block("\n".join(lines))]

    urls = payload.get("urls")
    if isinstance(urls, list) and urls:
        blocks.append(text_block("\nCrawled URLs:\n" + _preview(urls, str)))

    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        blocks.append(text_block("\nErrors:\n" + _preview(errors, _error_line)))
    return blocks


def _error_line(error: Any) -> str:
    if not isinstance(error, Mapping):
        return str(error)
    url = error.get("url") or ""
    message = error.get("message") or error.get("error") or "Unknown error"
    return f"{url}: {message}"


# Multi-format scrape results


def _has_formats(payload: Mapping[str, Any]) -> bool:
    return isinstance(payload.get("formats"), Mapping)


def _render_formats(payload: Mapping[str, Any]) -> list[ContentBlock]:
    formats = payload["formats"]
    blocks: list[ContentBlock] = []

    raw_html = formats.get("rawHtml") or formats.get("raw_html")
    if formats.get("markdown"):
        blocks.append(text_block(str(formats["markdown"])))
    elif formats.get("html"):
        blocks.append(ContentBlock(ContentType.HTML, str(formats["html"])))
    elif raw_html:
        blocks.append(ContentBlock(ContentType.HTML, str(raw_html)))

    if formats.get("screenshot"):
        blocks.append(ContentBlock(ContentType.IMAGE, str(formats["screenshot"])))

    links = formats.get("links")
    if isinstance(links, list) and links:
        header = _plural(len(links), "link") + " found:"
        lines = _bullets([_link_line(link) for link in links])
        blocks.append(text_block(f"\n{header}\n{lines}"))
    return blocks


def _link_line(link: Any) -> str:
    if not isinstance(link, Mapping):
        return str(link)
    url = link.get("url") or ""
    text = link.get("text")
    return f"{url}: {text}" if text else str(url)


# Flat format properties


def _render_flat(payload: Mapping[str, Any]) -> list[ContentBlock]:
    if payload.get("markdown"):
        return [text_block(str(payload["markdown"]))]
    if payload.get("html"):
        return [ContentBlock(ContentType.HTML, str(payload["html"]))]
    if payload.get("text"):
        return [text_block(str(payload["text"]))]
    if isinstance(payload.get("extracted"), (Mapping, list)):
        return [json_block(payload["extracted"])]
    return []


SHAPE_FORMATTERS: tuple[ShapeFormatter, ...] = (
    ShapeFormatter("research", _is_research, _render_research),
    ShapeFormatter("url_list", _is_url_list, _render_url_list),
    ShapeFormatter("search", _is_search, _render_search),
    ShapeFormatter("status", _is_status, _render_status),
    ShapeFormatter("formats", _has_formats, _render_formats),
    ShapeFormatter("flat", lambda payload: True, _render_flat),
)
