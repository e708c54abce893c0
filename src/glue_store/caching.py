"""Least-recently-used caching for key-value stores.

Provides a bounded in-memory LRU cache and a store decorator that uses it to
avoid repeated reads from a slower backing store.
"""

import asyncio
from collections import OrderedDict
from typing import Generic, TypeVar

from glue_store.exceptions import BadConfigError
from glue_store.observability import emit_counter, get_logger
from glue_store.protocols.kv_store import KVStore

T = TypeVar("T")

DEFAULT_CAPACITY = 512

logger = get_logger(__name__)


class LRUCache(Generic[T]):
    """Fixed-capacity cache evicting the least recently used entry.

    Each method holds the lock for its whole body, so individual operations
    are atomic. Sequences of operations are not.

    Example:
        cache = LRUCache[bytes](capacity=512)
        await cache.set("key", b"value")
        value = await cache.get("key")
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize cache.

        Args:
            capacity: Maximum number of entries held at once

        Raises:
            BadConfigError: If capacity is less than 1
        """
        if capacity < 1:
            raise BadConfigError(f"can't create LRU cache with capacity {capacity}")

        self._capacity = capacity
        self._cache: OrderedDict[str, T] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> T | None:
        """Get a value and mark it most recently used.

        Returns None if not cached.
        """
        async with self._lock:
            if key not in self._cache:
                return None
            self._cache.move_to_end(key)
            return self._cache[key]

    async def set(self, key: str, value: T) -> None:
        """Insert or replace a value, evicting the oldest entry if full."""
        async with self._lock:
            self._cache[key] = value
            self._cache.move_to_end(key)
            while len(self._cache) > self._capacity:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("evicted cache entry", context={"key": evicted})

    async def delete(self, key: str) -> bool:
        """Remove a key from the cache.

        Returns True if key was cached.
        """
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    async def clear(self) -> None:
        """Clear all entries."""
        async with self._lock:
            self._cache.clear()

    @property
    def size(self) -> int:
        """Get current cache size."""
        return len(self._cache)

    @property
    def capacity(self) -> int:
        """Get maximum cache size."""
        return self._capacity


class LRUKVStore:
    """KVStore decorator serving repeated reads from an LRU cache.

    Writes go through to the underlying store after updating the cache. If the
    underlying write fails the error propagates but the cache keeps the new
    value until it is evicted, overwritten or deleted. Existence checks and
    listings always hit the underlying store.

    Example:
        store = LRUKVStore(S3KVStore(bucket="glue"))
        await store.get("discourse/1234")  # loads from S3
        await store.get("discourse/1234")  # served from memory
    """

    def __init__(self, underlying: KVStore, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize caching store.

        Args:
            underlying: Store to cache reads from
            capacity: Maximum number of cached values
        """
        self.underlying = underlying
        self._cache: LRUCache[bytes] = LRUCache(capacity)

    @property
    def cache(self) -> LRUCache[bytes]:
        """The cache backing this store."""
        return self._cache

    async def get(self, key: str) -> bytes:
        """Get a value, loading it from the underlying store on a miss."""
        result = await self._cache.get(key)
        if result is not None:
            emit_counter("store_iops", {"driver": "lru", "action": "cache_read"})
            return result

        emit_counter("store_iops", {"driver": "lru", "action": "cache_load"})
        result = await self.underlying.get(key)
        await self._cache.set(key, result)
        return result

    async def set(self, key: str, value: bytes) -> None:
        """Cache a value and write it through to the underlying store."""
        value = bytes(value)
        await self._cache.set(key, value)
        await self.underlying.set(key, value)

    async def delete(self, key: str) -> None:
        """Evict a key and delete it from the underlying store."""
        await self._cache.delete(key)
        await self.underlying.delete(key)

    async def exists(self, key: str) -> None:
        """Check existence in the underlying store."""
        await self.underlying.exists(key)

    async def list(self, prefix: str) -> list[str]:
        """List keys from the underlying store."""
        return await self.underlying.list(prefix)
