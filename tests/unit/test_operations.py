"""Unit tests for the operation catalogue."""

import pytest

from crawl4ai_mcp.core.operations import ArgumentKind, Operation


@pytest.mark.parametrize(
    ("operation", "method", "path", "argument"),
    [
        (Operation.SCRAPE, "POST", "/scrape", ArgumentKind.URL),
        (Operation.CRAWL, "POST", "/crawl", ArgumentKind.URL),
        (Operation.MAP, "POST", "/map", ArgumentKind.URL),
        (Operation.EXTRACT, "POST", "/extract", ArgumentKind.URL_LIST),
        (Operation.CHECK_STATUS, "GET", "/crawl/{id}/status", ArgumentKind.JOB_ID),
        (Operation.SEARCH, "POST", "/search", ArgumentKind.QUERY),
        (Operation.DEEP_RESEARCH, "POST", "/deep-research", ArgumentKind.QUERY),
    ],
)
def test_routes(
    operation: Operation, method: str, path: str, argument: ArgumentKind
) -> None:
    assert operation.method == method
    assert operation.path == path
    assert operation.argument is argument


def test_only_read_mostly_operations_are_cacheable() -> None:
    cacheable = {operation for operation in Operation if operation.cacheable}
    assert cacheable == {
        Operation.SCRAPE,
        Operation.MAP,
        Operation.EXTRACT,
        Operation.CHECK_STATUS,
    }


def test_path_fields() -> None:
    assert Operation.CHECK_STATUS.path_fields == ("id",)
    assert Operation.SCRAPE.path_fields == ()


def test_argument_param_names() -> None:
    assert [kind.param_name for kind in ArgumentKind] == ["url", "query", "id", "urls"]
