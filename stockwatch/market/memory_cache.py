import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from stockwatch.storage.models import CacheEntry

logger = structlog.get_logger()


def request_key(function: str, params: Mapping[str, str] | None = None) -> str:
    """Identity of an upstream request: function plus its sorted parameters."""
    if not params:
        return function
    query = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{function}?{query}"


class MemoryCache:
    """Short-lived per-process cache keyed by request identity.

    Expired entries are kept until overwritten, evicted or cleared so that
    ``get_stale`` can still serve them when the upstream is unavailable. The
    store is capped at ``max_entries`` with least-recently-used eviction.
    """

    def __init__(
        self,
        default_ttl: float = 300.0,
        max_entries: int | None = 512,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[Any]] = OrderedDict()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None or not entry.is_valid(self._clock()):
            return None
        self._entries.move_to_end(key)
        return entry.value

    def get_stale(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry[Any](
            value=value,
            timestamp=now,
            expires_at=now + (ttl if ttl is not None else self._default_ttl),
        )
        self._entries.move_to_end(key)
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("memory_cache_evicted", key=evicted)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info("memory_cache_cleared", entries=count)

    def __len__(self) -> int:
        return len(self._entries)
