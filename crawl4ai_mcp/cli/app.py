"""Typer application entry point for the crawl4ai-mcp CLI."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from crawl4ai_mcp.bridge.tools import ToolDispatcher, create_dispatcher
from crawl4ai_mcp.core.config import Settings
from crawl4ai_mcp.core.logger import get_logger

app = typer.Typer(no_args_is_help=True, name="crawl4ai-mcp")


@app.command(name="tools", help="List the available Crawl4AI tools")
def tools_command() -> None:
    settings = Settings()
    dispatcher = create_dispatcher(settings)
    try:
        declarations = dispatcher.list_tools()
    finally:
        asyncio.run(dispatcher.close())

    table = Table(title="Crawl4AI Tools")
    table.add_column("Tool", no_wrap=True)
    table.add_column("Parameters")
    table.add_column("Description")
    for tool in declarations:
        schema = tool["input_schema"]
        required = set(schema.get("required", []))
        params = ", ".join(
            f"[bold]{name}[/bold]" if name in required else name
            for name in schema.get("properties", {})
        )
        table.add_row(tool["name"], params, tool["description"])
    Console().print(table)


@app.command(name="call", help="Invoke one tool and print its content blocks")
def call_command(
    tool: str = typer.Argument(..., help="Tool name, e.g. crawl4ai_scrape or scrape"),
    param: list[str] = typer.Option(
        None, "-p", "--param", help="Parameter as key=value; values are parsed as JSON"
    ),
    raw_json: str | None = typer.Option(
        None, "--json", help="Parameters as a JSON object, merged before --param"
    ),
    output_json: bool = typer.Option(False, "--output-json", help="Print the raw response"),
) -> None:
    """Invoke a Crawl4AI tool through the dispatcher."""
    parameters = _parse_parameters(raw_json, param or [])

    settings = Settings()
    get_logger("crawl4ai_mcp", settings.log_level, settings.log_file)
    dispatcher = create_dispatcher(settings)
    if dispatcher.get_tool(tool) is None:
        typer.echo(f"Unknown tool: {tool}")
        asyncio.run(dispatcher.close())
        raise typer.Exit(code=1)

    response = asyncio.run(_call(dispatcher, tool, parameters))

    console = Console()
    if output_json:
        console.print_json(data=response)
        return
    _print_blocks(console, response["content"])


async def _call(
    dispatcher: ToolDispatcher, tool: str, parameters: dict[str, Any]
) -> dict[str, list[dict[str, str]]]:
    async with dispatcher:
        return await dispatcher.call(tool, parameters)


def _parse_parameters(raw_json: str | None, pairs: list[str]) -> dict[str, Any]:
    parameters: dict[str, Any] = {}
    if raw_json:
        try:
            loaded = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON: {exc}") from exc
        if not isinstance(loaded, dict):
            raise typer.BadParameter("--json must be a JSON object")
        parameters.update(loaded)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got: {pair}")
        parameters[key.strip()] = _parse_value(value)
    return parameters


def _parse_value(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _print_blocks(console: Console, blocks: list[dict[str, str]]) -> None:
    for block in blocks:
        kind, text = block["type"], block["text"]
        if kind == "json":
            try:
                console.print_json(text)
            except json.JSONDecodeError:
                console.print(text, markup=False)
        elif kind == "image":
            console.print(f"[dim]<image: {len(text)} characters>[/dim]")
        else:
            console.print(text, markup=False, highlight=False)


if __name__ == "__main__":
    app()
