"""
In-process TTL caches for pipeline results and response text.

Entries expire lazily: a stale entry is removed when it is looked up.
All operations hold a lock, so one cache can be shared across request
threads.
"""
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from carsearch.core.config import SearchConfig, get_config
from carsearch.utils.logger import get_logger

logger = get_logger("cache.ttl_cache")

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    key: Hashable
    value: T
    created_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl


class TTLCache(Generic[T]):
    """
    Thread-safe key/value cache with a fixed time-to-live.

    Args:
        ttl: Entry lifetime in seconds
        name: Label used in log lines
        clock: Time source returning seconds (injectable for tests)
    """

    def __init__(self, ttl: float, name: str = "cache", clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                logger.debug(f"[{self.name}] expired: {key!r}")
                return None
            return entry.value

    def set(self, key: Hashable, value: T) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock(), ttl=self.ttl)

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the cached value, or compute and store it. ``compute`` runs outside the lock."""
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"[{self.name}] hit: {key!r}")
            return cached
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SearchCaches:
    """The two caches a pipeline owns: full search results and synthesized response text."""

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        config = config or get_config()
        self.results: TTLCache[Any] = TTLCache(config.pipeline_cache_ttl, name="results", clock=clock)
        self.responses: TTLCache[str] = TTLCache(config.response_cache_ttl, name="responses", clock=clock)

    def clear(self) -> Dict[str, int]:
        cleared = {"results": self.results.clear(), "responses": self.responses.clear()}
        logger.info(f"Caches cleared: {cleared}")
        return cleared

    def close(self) -> None:
        self.clear()
