"""Tool handlers and dispatch for the Crawl4AI bridge."""

from crawl4ai_mcp.bridge.handler_factory import (
    HandlerOptions,
    create_handler,
    list_validator,
    string_validator,
)
from crawl4ai_mcp.bridge.tools import (
    TOOLS,
    ToolDeclaration,
    ToolDispatcher,
    build_handlers,
    create_dispatcher,
)

__all__ = [
    "build_handlers",
    "create_dispatcher",
    "create_handler",
    "HandlerOptions",
    "list_validator",
    "string_validator",
    "ToolDeclaration",
    "ToolDispatcher",
    "TOOLS",
]
