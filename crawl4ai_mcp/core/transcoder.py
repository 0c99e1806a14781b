"""Parameter key transcoding for the Crawl4AI wire format.

Tool callers send camelCase keys (``onlyMainContent``) while the Crawl4AI
HTTP API expects snake_case (``only_main_content``). This module rewrites keys
recursively without touching values.

Example:
    >>> transcode({"waitFor": 2000, "scrapeOptions": {"onlyMainContent": True}})
    {'wait_for': 2000, 'scrape_options': {'only_main_content': True}}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class _Undefined:
    """Marker for a parameter that was never supplied.

    ``None`` is a real JSON ``null`` and is forwarded upstream. ``UNDEFINED``
    means "omit this key entirely".
    """

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Any = _Undefined()


def to_snake_case(key: str) -> str:
    """Convert a camelCase key to snake_case.

    Only ASCII uppercase letters are rewritten, so the result never depends on
    the process locale. Digits, underscores and lowercase letters pass through.

    Args:
        key: Parameter name in camelCase

    Returns:
        Parameter name in snake_case
    """
    return "".join(f"_{char.lower()}" if "A" <= char <= "Z" else char for char in key)


def transcode(params: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite every key of a parameter bag to snake_case.

    The input is never mutated; a new dict is returned with the same nesting
    and the same list lengths. ``UNDEFINED`` values are dropped, ``None`` is
    kept. Callers must not pass cyclic structures.

    Args:
        params: Caller-supplied parameters with camelCase keys

    Returns:
        New dict with snake_case keys
    """
    result: dict[str, Any] = {}
    for key, value in params.items():
        if value is UNDEFINED:
            continue
        result[to_snake_case(key)] = _transcode_value(value)
    return result


def _transcode_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return transcode(value)
    if isinstance(value, (list, tuple)):
        return [transcode(item) if isinstance(item, Mapping) else item for item in value]
    return value
