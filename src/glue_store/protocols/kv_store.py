"""KVStore protocol for byte-oriented key-value storage backends."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KVStore(Protocol):
    """Protocol for key-value storage backends (memory, S3, caching wrappers).

    Every method is a coroutine. Cancelling the awaiting task aborts the call
    and propagates ``asyncio.CancelledError``.
    """

    async def get(self, key: str) -> bytes:
        """Get a value by key. Raises NotFoundError if not found."""
        ...

    async def set(self, key: str, value: bytes) -> None:
        """Create or overwrite a value."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a key. No-op if key doesn't exist."""
        ...

    async def exists(self, key: str) -> None:
        """Return if the key exists, raise NotFoundError if it doesn't."""
        ...

    async def list(self, prefix: str) -> list[str]:
        """List full keys starting with a prefix."""
        ...
