"""Tool handler factory.

Creates handlers with uniform parameter validation, argument extraction,
response normalization and error handling. A handler never raises: every
outcome, including failures, is a non-empty list of content blocks.

Example:
    >>> scrape = create_handler(
    ...     client,
    ...     Operation.SCRAPE,
    ...     HandlerOptions(
    ...         validate_params=string_validator("url", "URL is required and must be a string"),
    ...         error_context=lambda params: f"Error scraping {params.get('url')}",
    ...     ),
    ... )
    >>> blocks = await scrape({"url": "https://example.com"})
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from crawl4ai_mcp.core.interfaces import UpstreamClient
from crawl4ai_mcp.core.operations import Operation
from crawl4ai_mcp.processing.normalizer import ContentBlock, normalize, text_block
from crawl4ai_mcp.resilience.errors import (
    ClassifiedError,
    ErrorClassifier,
    ParameterValidationError,
    error_details,
)

logger = logging.getLogger(__name__)

DEFAULT_ERROR_CONTEXT = "Error during operation"

Params = Mapping[str, Any]
Handler = Callable[[Params], Awaitable[list[ContentBlock]]]
ClientCall = Callable[[UpstreamClient, Any, dict[str, Any]], Awaitable[Any]]

_DISPATCH: dict[Operation, ClientCall] = {
    Operation.SCRAPE: lambda client, arg, options: client.scrape(arg, options),
    Operation.CRAWL: lambda client, arg, options: client.crawl(arg, options),
    Operation.MAP: lambda client, arg, options: client.map_urls(arg, options),
    Operation.EXTRACT: lambda client, arg, options: client.extract(arg, options),
    Operation.CHECK_STATUS: lambda client, arg, options: client.check_crawl_status(
        arg, options
    ),
    Operation.SEARCH: lambda client, arg, options: client.search(arg, options),
    Operation.DEEP_RESEARCH: lambda client, arg, options: client.deep_research(
        arg, options
    ),
}


@dataclass(frozen=True)
class HandlerOptions:
    """Per-tool customization of a generated handler.

    Attributes:
        validate_params: Raises ``ParameterValidationError`` for bad input;
            runs before any upstream call
        transform_response: Applied to a non-empty payload before normalizing
        empty_response_message: Text returned when the payload is empty
        error_context: Prefix for error messages
        error_payload: Turns an upstream failure into a payload that is
            normalized instead of reported as error text
    """

    validate_params: Callable[[Params], None] | None = None
    transform_response: Callable[[Any], Any] | None = None
    empty_response_message: Callable[[Params], str] | None = None
    error_context: Callable[[Params], str] | None = None
    error_payload: Callable[[Params, ClassifiedError], Any] | None = None


def create_handler(
    client: UpstreamClient,
    operation: Operation,
    options: HandlerOptions | None = None,
    classifier: ErrorClassifier | None = None,
) -> Handler:
    """Create a handler invoking ``operation`` on ``client``.

    Args:
        client: Typed upstream client
        operation: Operation the handler invokes
        options: Validation, formatting and error customization
        classifier: Classifier for failures raised outside the client

    Returns:
        Coroutine function mapping a parameter bag to content blocks
    """
    opts = options or HandlerOptions()
    errors = classifier or ErrorClassifier()
    call = _DISPATCH[operation]
    arg_name = operation.argument.param_name

    async def handler(params: Params) -> list[ContentBlock]:
        try:
            if opts.validate_params is not None:
                opts.validate_params(params)

            argument = params.get(arg_name)
            remainder = {key: value for key, value in params.items() if key != arg_name}

            try:
                payload = await call(client, argument, remainder)
            except ClassifiedError as exc:
                if opts.error_payload is None:
                    raise
                logger.warning(
                    "%s failed, returning error payload: %s",
                    operation.value,
                    exc.message,
                    extra={"operation": operation.value, **error_details(exc)},
                )
                payload = opts.error_payload(params, exc)

            if not payload:
                if opts.empty_response_message is not None:
                    message = opts.empty_response_message(params)
                else:
                    message = f"No content was returned from {_describe(argument)}."
                return [text_block(message)]

            if opts.transform_response is not None:
                payload = opts.transform_response(payload)
            return normalize(payload)
        except Exception as exc:  # noqa: BLE001
            return [_error_block(exc, params, opts, errors, operation)]

    handler.__name__ = f"handle_{operation.name.lower()}"
    return handler


def _error_block(
    exc: Exception,
    params: Params,
    opts: HandlerOptions,
    classifier: ErrorClassifier,
    operation: Operation,
) -> ContentBlock:
    context = _error_context(params, opts)
    if isinstance(exc, ClassifiedError):
        error = exc
        message = f"{context}: {exc.message}"
    else:
        error = classifier.classify(exc, context)
        message = error.message

    logger.error(
        "%s failed: %s",
        operation.value,
        message,
        extra={"operation": operation.value, **error_details(error)},
    )
    return text_block(message)


def _error_context(params: Params, opts: HandlerOptions) -> str:
    if opts.error_context is None:
        return DEFAULT_ERROR_CONTEXT
    try:
        return opts.error_context(params)
    except Exception:  # noqa: BLE001
        logger.exception("error_context callback failed")
        return DEFAULT_ERROR_CONTEXT


def _describe(argument: Any) -> str:
    if isinstance(argument, (list, tuple)):
        return ", ".join(str(item) for item in argument)
    return str(argument)


def string_validator(
    name: str, message: str | None = None
) -> Callable[[Params], None]:
    """Require ``params[name]`` to be a non-empty string."""

    def validate(params: Params) -> None:
        value = params.get(name)
        if not value or not isinstance(value, str):
            raise ParameterValidationError(
                message or f"{name} is required and must be a string"
            )

    return validate


def list_validator(name: str, message: str | None = None) -> Callable[[Params], None]:
    """Require ``params[name]`` to be a non-empty list."""

    def validate(params: Params) -> None:
        value = params.get(name)
        if not value or not isinstance(value, (list, tuple)):
            raise ParameterValidationError(
                message or f"{name} is required and must be an array"
            )

    return validate
