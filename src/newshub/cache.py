"""Read-through cache for list endpoints.

Entries expire after their TTL and are never invalidated by writes, so a
freshly written article may not show up in a cached list until expiry.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable, Protocol


class Cache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...


def cache_key_for(prefix: str, params: dict) -> str:
    """Derive a stable cache key from a prefix and the exact query parameters."""
    encoded = json.dumps(params, sort_keys=True, default=str)
    return f"{prefix}_{hashlib.md5(encoded.encode('utf-8')).hexdigest()}"


class TTLCache:
    """In-process, thread-safe cache with per-entry expiry.

    Expired entries are purged on every write, and once ``max_entries`` live
    entries are held the oldest-written one is evicted.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1024,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = (now + ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class NullCache:
    """Cache that stores nothing."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: float) -> None:
        return None


def remember(cache: Cache, key: str, ttl: float, compute: Callable[[], Any]) -> Any:
    """Return the cached value for key, computing and storing it on a miss."""
    value = cache.get(key)
    if value is None:
        value = compute()
        cache.set(key, value, ttl)
    return value
