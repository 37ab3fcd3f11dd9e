"""
TTL Cache

Small process-wide cache for read-mostly reference data (document
categories). Built once at application startup and handed to the stores
that need it; the clock is injected so invalidation is testable.
"""

import asyncio
import time
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """Key/value cache whose entries expire ``ttl_seconds`` after being stored"""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, T]] = {}
        self._lock = asyncio.Lock()

    def get(self, key: Hashable) -> Optional[T]:
        """Return the cached value, or None when missing or expired"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: T) -> None:
        self._entries[key] = (self._clock(), value)

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one entry, or everything when no key is given"""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value or await ``loader`` and cache its result.

        Concurrent misses for the same cache are serialized so the loader
        runs once per expiry window.
        """
        value = self.get(key)
        if value is not None:
            return value

        async with self._lock:
            value = self.get(key)
            if value is None:
                value = await loader()
                self.set(key, value)
            return value
