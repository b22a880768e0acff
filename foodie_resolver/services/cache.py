from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Generic, Optional, TypeVar

from ..config import get_settings
from ..domains import CuisineType
from ..models import LocationResolution

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    inserted_at: float


class TTLCache(Generic[V]):
    """
    Thread-safe map from normalized key to value with a fixed time-to-live.

    Expired entries read as misses but stay in storage until the next put
    for the same key overwrites them; nothing sweeps them proactively.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry[V]] = {}
        self._lock = Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: str) -> Optional[V]:
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            return None
        if now - entry.inserted_at > self._ttl_seconds:
            return None
        return entry.value

    def put(self, key: str, value: V) -> None:
        entry = CacheEntry(key=key, value=value, inserted_at=self._clock())
        with self._lock:
            self._store[key] = entry

    def entry(self, key: str) -> Optional[CacheEntry[V]]:
        """Raw stored entry, expired or not."""
        with self._lock:
            return self._store.get(key)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return number of stored entries, including expired ones."""
        with self._lock:
            return len(self._store)


class ResolutionCache:
    """The two independent caches used by the resolver."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cuisine: TTLCache[CuisineType] = TTLCache(ttl_seconds, clock=clock)
        self.location: TTLCache[LocationResolution] = TTLCache(ttl_seconds, clock=clock)

    def clear(self) -> None:
        self.cuisine.clear()
        self.location.clear()


_resolution_cache: ResolutionCache | None = None


def get_resolution_cache() -> ResolutionCache:
    global _resolution_cache
    if _resolution_cache is None:
        _resolution_cache = ResolutionCache(get_settings().cache_ttl_seconds)
    return _resolution_cache


def reset_resolution_cache() -> None:
    global _resolution_cache
    _resolution_cache = None
