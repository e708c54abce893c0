"""In-memory key-value storage."""

import asyncio
from typing import Any

from glue_store.exceptions import NotFoundError
from glue_store.observability import emit_counter


class MemoryKVStore:
    """In-memory key-value store.

    Suitable for development and testing. Data is lost on restart.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize memory KV store.

        Args:
            **kwargs: Ignored (for compatibility with other backends)
        """
        self._data: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> bytes:
        """Get a value by key."""
        emit_counter("store_iops", {"driver": "memory", "action": "get"})
        async with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise NotFoundError(operation="get", key=key) from None

    async def set(self, key: str, value: bytes) -> None:
        """Create or overwrite a value."""
        emit_counter("store_iops", {"driver": "memory", "action": "set"})
        async with self._lock:
            self._data[key] = bytes(value)

    async def delete(self, key: str) -> None:
        """Delete a key."""
        emit_counter("store_iops", {"driver": "memory", "action": "delete"})
        async with self._lock:
            self._data.pop(key, None)

    async def exists(self, key: str) -> None:
        """Raise NotFoundError unless the key is present."""
        emit_counter("store_iops", {"driver": "memory", "action": "exists"})
        async with self._lock:
            if key not in self._data:
                raise NotFoundError(operation="exists", key=key)

    async def list(self, prefix: str) -> list[str]:
        """List keys matching a prefix."""
        emit_counter("store_iops", {"driver": "memory", "action": "list"})
        async with self._lock:
            return [k for k in self._data if k.startswith(prefix)]

    async def clear(self) -> None:
        """Clear all data. Useful for testing."""
        async with self._lock:
            self._data.clear()
