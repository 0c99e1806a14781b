"""In-memory response cache for read-mostly upstream operations.

Entries expire a fixed time after insertion and the least recently used entry
is evicted once capacity is reached. The cache is process-local and is lost on
restart. Values are copied on the way in and out so callers never share
state with an entry. It is a performance optimization only: a concurrent miss on the same
key simply results in a redundant upstream call.
"""

from __future__ import annotations

import copy
import json
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from crawl4ai_mcp.core.operations import Operation


@dataclass(frozen=True)
class CacheEntry:
    """One cached upstream payload with its expiry timestamp."""

    value: Any
    expires_at: float


def make_cache_key(operation: Operation, params: Mapping[str, Any]) -> str:
    """Build a deterministic cache key.

    Keys are sorted so two bags with equal content produce the same key
    regardless of insertion order.

    Args:
        operation: Upstream operation
        params: Transcoded parameters

    Returns:
        Cache key string
    """
    encoded = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"{operation.value}:{encoded}"


class ResponseCache:
    """Bounded TTL + LRU cache.

    Args:
        capacity: Maximum number of entries kept
        default_ttl: Lifetime in seconds used when ``set`` gets no ``ttl``
        clock: Monotonic time source, injectable for tests

    Example:
        >>> cache = ResponseCache(capacity=2, default_ttl=60)
        >>> cache.set("a", {"markdown": "# A"})
        >>> cache.get("a")
        {'markdown': '# A'}
        >>> cache.stats()
        {'size': 1, 'capacity': 2}
    """

    def __init__(
        self,
        capacity: int = 100,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.capacity = capacity
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value, evicting the least recently used entry if full."""
        lifetime = self.default_ttl if ttl is None else ttl
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value), expires_at=self._clock() + lifetime
        )
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, int]:
        return {"size": len(self._entries), "capacity": self.capacity}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
