"""Unit tests for error classification."""

import logging

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from crawl4ai_mcp.core.config import ExecutionMode
from crawl4ai_mcp.resilience.errors import (
    ClassifiedError,
    ErrorClassifier,
    ErrorKind,
    ParameterValidationError,
    error_details,
)

URL = "http://localhost:11235/scrape"


def _status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", URL)
    response = httpx.Response(status, request=request, **kwargs)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestHttpStatusClassification:
    @pytest.mark.parametrize(
        ("status", "kind", "retryable"),
        [
            (400, ErrorKind.VALIDATION, False),
            (422, ErrorKind.VALIDATION, False),
            (401, ErrorKind.AUTH, False),
            (403, ErrorKind.AUTH, False),
            (404, ErrorKind.CLIENT, False),
            (429, ErrorKind.RATE_LIMIT, True),
            (500, ErrorKind.SERVER, True),
            (503, ErrorKind.SERVER, True),
        ],
    )
    def test_status_maps_to_kind(
        self, status: int, kind: ErrorKind, retryable: bool
    ) -> None:
        error = ErrorClassifier().classify(_status_error(status), "API POST /scrape")

        assert error.kind is kind
        assert error.retryable is retryable
        assert error.http_status == status

    def test_message_uses_upstream_error_field(self) -> None:
        error = ErrorClassifier().classify(
            _status_error(401, json={"error": "Invalid API key"}), "API POST /scrape"
        )
        assert error.message == "API POST /scrape: Invalid API key"

    def test_message_falls_back_to_detail_field(self) -> None:
        error = ErrorClassifier().classify(
            _status_error(503, json={"detail": "Browser pool exhausted"}), "ctx"
        )
        assert error.message == "ctx: Browser pool exhausted"

    def test_message_generic_when_body_is_not_json(self) -> None:
        error = ErrorClassifier().classify(_status_error(502, text="<html>bad</html>"), "ctx")
        assert error.message == "ctx: Upstream request failed with status 502"


class TestTransportClassification:
    def test_timeout_is_retryable_timeout(self) -> None:
        request = httpx.Request("POST", URL)
        error = ErrorClassifier().classify(httpx.ReadTimeout("timed out", request=request))

        assert error.kind is ErrorKind.TIMEOUT
        assert error.retryable is True
        assert error.message == "Request timed out: timed out"

    def test_builtin_timeout_error(self) -> None:
        assert ErrorClassifier().classify(TimeoutError()).kind is ErrorKind.TIMEOUT

    def test_connect_error_is_network(self) -> None:
        request = httpx.Request("POST", URL)
        error = ErrorClassifier().classify(httpx.ConnectError("", request=request), "ctx")

        assert error.kind is ErrorKind.NETWORK
        assert error.retryable is True
        assert error.message == "ctx: Network error: no response received"

    def test_timeout_indicator_in_message(self) -> None:
        error = ErrorClassifier().classify(RuntimeError("Connection timeout after 30s"))
        assert error.kind is ErrorKind.TIMEOUT
        assert error.retryable is True


class TestOtherClassification:
    def test_already_classified_is_returned_unchanged(self) -> None:
        original = ClassifiedError(ErrorKind.SERVER, "boom", retryable=True, http_status=500)
        assert ErrorClassifier().classify(original, "other context") is original

    def test_parameter_validation(self) -> None:
        error = ErrorClassifier().classify(
            ParameterValidationError("URL is required and must be a string"), "Error scraping"
        )
        assert error.kind is ErrorKind.VALIDATION
        assert error.retryable is False
        assert error.message == "Error scraping: URL is required and must be a string"

    def test_pydantic_validation_error_is_summarized(self) -> None:
        class Params(BaseModel):
            url: str

        with pytest.raises(ValidationError) as exc_info:
            Params.model_validate({})

        error = ErrorClassifier().classify(exc_info.value, "Invalid parameters")
        assert error.kind is ErrorKind.VALIDATION
        assert error.message == "Invalid parameters: url: Field required"

    def test_unexpected_exception_is_unknown(self) -> None:
        error = ErrorClassifier().classify(KeyError("missing"))
        assert error.kind is ErrorKind.UNKNOWN
        assert error.retryable is False

    def test_non_exception_value(self) -> None:
        error = ErrorClassifier().classify("something odd", "ctx")
        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == "ctx: Unknown error: 'something odd'"

    def test_message_without_context_has_no_prefix(self) -> None:
        error = ErrorClassifier().classify(ValueError("bad value"))
        assert error.message == "bad value"


class TestExecutionModes:
    def test_production_details_are_status_only(self) -> None:
        classifier = ErrorClassifier(ExecutionMode.PRODUCTION)
        error = classifier.classify(_status_error(503, json={"detail": "secret stack"}))

        assert error.details == "kind=server status=503"
        assert "secret" not in error.details

    def test_development_details_carry_raw_body(self) -> None:
        classifier = ErrorClassifier(ExecutionMode.DEVELOPMENT)
        error = classifier.classify(_status_error(503, json={"detail": "secret stack"}))

        assert "secret stack" in error.details

    def test_development_details_carry_traceback(self) -> None:
        classifier = ErrorClassifier(ExecutionMode.DEVELOPMENT)
        try:
            raise RuntimeError("exploded")
        except RuntimeError as exc:
            error = classifier.classify(exc)

        assert "Traceback" in error.details
        assert "exploded" in error.details

    def test_production_details_for_non_http_error(self) -> None:
        error = ErrorClassifier().classify(RuntimeError("exploded"))
        assert error.details == "kind=unknown"


def test_error_details_for_logging() -> None:
    error = ClassifiedError(ErrorKind.AUTH, "denied", http_status=401)
    assert error_details(error) == {
        "kind": "auth",
        "http_status": 401,
        "retryable": False,
        "error_message": "denied",
    }
    assert str(error) == "denied"


def test_error_details_are_safe_as_log_extra(caplog: pytest.LogCaptureFixture) -> None:
    error = ClassifiedError(ErrorKind.SERVER, "API POST /scrape: overloaded", retryable=True)

    with caplog.at_level(logging.ERROR, logger="crawl4ai_mcp.tests"):
        logging.getLogger("crawl4ai_mcp.tests").error("scrape failed", extra=error_details(error))

    record = caplog.records[-1]
    assert record.error_message == "API POST /scrape: overloaded"
    assert record.kind == "server"
