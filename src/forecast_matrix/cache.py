"""
TTL result cache with per-client invalidation.

Keys follow `<category>-<scopeId>-<part>...` (see `cache_key`), so
`clear_client` can purge a client's entries by prefix without a secondary
index. Expiry is lazy: an expired entry is dropped when it is next read.
The cache is not thread-safe and does not coalesce concurrent computations
of the same key.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from forecast_matrix.config import Config, cfg

T = TypeVar("T")

KEY_SEPARATOR = "-"


def _now_ms() -> int:
    return int(time.time() * 1000)


def cache_key(category: str, scope_id: str, *parts: Any) -> str:
    """Build a `<category>-<scopeId>-<part>...` key."""
    category = str(category)
    if not category or KEY_SEPARATOR in category:
        raise ValueError(
            f"Cache category {category!r} must be non-empty and must not contain "
            f"{KEY_SEPARATOR!r}."
        )
    return KEY_SEPARATOR.join([category, str(scope_id), *(str(p) for p in parts)])


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    data: Any
    timestamp: int  # epoch ms
    ttl_ms: int

    def is_expired(self, now: int) -> bool:
        return now - self.timestamp > self.ttl_ms


class ResultCache:
    def __init__(
        self,
        default_ttl_ms: Optional[int] = None,
        *,
        clock: Callable[[], int] = _now_ms,
        max_entries: Optional[int] = None,
        config: Optional[Config] = None,
    ) -> None:
        C = config or cfg
        self.default_ttl_ms = int(
            C.CACHE_TTL_MS if default_ttl_ms is None else default_ttl_ms
        )
        if self.default_ttl_ms < 0:
            raise ValueError("default_ttl_ms must be non-negative.")
        self.max_entries = C.CACHE_MAX_ENTRIES if max_entries is None else max_entries
        if self.max_entries is not None and self.max_entries <= 0:
            raise ValueError("max_entries must be > 0 or None.")
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any:
        """Cached value for `key`, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.data

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        ttl = self.default_ttl_ms if ttl_ms is None else int(ttl_ms)
        if ttl < 0:
            raise ValueError("ttl_ms must be non-negative.")
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            key=key, data=value, timestamp=self._clock(), ttl_ms=ttl
        )
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def get_or_compute(
        self, key: str, compute: Callable[[], T], ttl_ms: Optional[int] = None
    ) -> T:
        entry = self._entries.get(key)
        if entry is not None and not entry.is_expired(self._clock()):
            self.hits += 1
            return entry.data  # type: ignore[no-any-return]
        self.misses += 1
        value = compute()
        self.set(key, value, ttl_ms)
        return value

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear_client(self, client_id: str) -> int:
        """Remove every entry scoped to `client_id`; returns how many went."""
        client_id = str(client_id)
        doomed = []
        for key in self._entries:
            _, sep, scoped = key.partition(KEY_SEPARATOR)
            if not sep:
                continue
            if scoped == client_id or scoped.startswith(client_id + KEY_SEPARATOR):
                doomed.append(key)
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "size": len(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and not entry.is_expired(self._clock())
