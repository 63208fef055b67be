"""In-memory analysis cache with per-entry expiry.

Expired entries are dropped when read, listed, or on the next write.
Values are deep-copied on the way in and out, so callers never share
mutable state with a stored entry. Nothing survives a process restart.
"""

import copy
import threading
import time
from typing import Any, Callable

DEFAULT_TTL_SECONDS = 3600


class AnalysisCache:
    """Key -> value store with a TTL per entry and hit/miss counters."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def _live_entry(self, key: str) -> tuple[Any, float] | None:
        # Caller must hold the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._entries[key]
            return None
        return entry

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            value = entry[0]
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        stored = copy.deepcopy(value)
        with self._lock:
            self._purge_expired()
            expires_at = self._clock() + (self.ttl_seconds if ttl is None else ttl)
            self._entries[key] = (stored, expires_at)

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def keys(self) -> list[str]:
        with self._lock:
            self._purge_expired()
            return list(self._entries)

    def get_ttl(self, key: str) -> float | None:
        """Expiry time of `key` as epoch seconds, or None if absent."""
        with self._lock:
            entry = self._live_entry(key)
            return entry[1] if entry else None

    def stats(self) -> dict:
        with self._lock:
            self._purge_expired()
            return {"keys": len(self._entries), "hits": self._hits, "misses": self._misses}

    def flush_all(self) -> int:
        """Remove every entry and return how many were removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed
