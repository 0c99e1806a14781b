"""Operation catalogue for the Crawl4AI bridge."""

from __future__ import annotations

from enum import Enum
from string import Formatter


class ArgumentKind(str, Enum):
    """Which parameter carries an operation's primary positional argument."""

    URL = "url"
    QUERY = "query"
    JOB_ID = "id"
    URL_LIST = "urls"

    @property
    def param_name(self) -> str:
        """Name of the parameter holding the argument."""
        return self.value


class Operation(str, Enum):
    """Upstream actions exposed as tools.

    Each member knows its HTTP method, path template, primary argument rule
    and whether responses may be served from the response cache.
    """

    SCRAPE = "scrape"
    CRAWL = "crawl"
    MAP = "map"
    EXTRACT = "extract"
    CHECK_STATUS = "checkStatus"
    SEARCH = "search"
    DEEP_RESEARCH = "deepResearch"

    @property
    def method(self) -> str:
        return _ROUTES[self][0]

    @property
    def path(self) -> str:
        return _ROUTES[self][1]

    @property
    def argument(self) -> ArgumentKind:
        return _ROUTES[self][2]

    @property
    def cacheable(self) -> bool:
        """Read-mostly operations only; job-starting calls are never cached."""
        return self in _CACHEABLE

    @property
    def path_fields(self) -> tuple[str, ...]:
        """Placeholder names in the path template, e.g. ``("id",)``."""
        return tuple(
            field for _, field, _, _ in Formatter().parse(self.path) if field is not None
        )


_ROUTES: dict[Operation, tuple[str, str, ArgumentKind]] = {
    Operation.SCRAPE: ("POST", "/scrape", ArgumentKind.URL),
    Operation.CRAWL: ("POST", "/crawl", ArgumentKind.URL),
    Operation.MAP: ("POST", "/map", ArgumentKind.URL),
    Operation.EXTRACT: ("POST", "/extract", ArgumentKind.URL_LIST),
    Operation.CHECK_STATUS: ("GET", "/crawl/{id}/status", ArgumentKind.JOB_ID),
    Operation.SEARCH: ("POST", "/search", ArgumentKind.QUERY),
    Operation.DEEP_RESEARCH: ("POST", "/deep-research", ArgumentKind.QUERY),
}

_CACHEABLE = frozenset(
    {Operation.SCRAPE, Operation.MAP, Operation.EXTRACT, Operation.CHECK_STATUS}
)
