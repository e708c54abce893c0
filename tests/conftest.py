"""Pytest configuration and fixtures."""

import asyncio
from collections import Counter

import pytest

from glue_store.backends.kv.memory import MemoryKVStore
from glue_store.observability import register_metric_callback, unregister_metric_callback


class CountingKVStore(MemoryKVStore):
    """Memory store that counts calls per operation."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: Counter[str] = Counter()

    async def get(self, key: str) -> bytes:
        self.calls["get"] += 1
        return await super().get(key)

    async def set(self, key: str, value: bytes) -> None:
        self.calls["set"] += 1
        await super().set(key, value)

    async def delete(self, key: str) -> None:
        self.calls["delete"] += 1
        await super().delete(key)

    async def exists(self, key: str) -> None:
        self.calls["exists"] += 1
        await super().exists(key)

    async def list(self, prefix: str) -> list[str]:
        self.calls["list"] += 1
        return await super().list(prefix)


@pytest.fixture
def memory_store():
    """Create an empty memory KV store."""
    return MemoryKVStore()


@pytest.fixture
def counting_store():
    """Create a memory KV store that records how often it is called."""
    return CountingKVStore()


@pytest.fixture
def metrics():
    """Collect emitted metrics for the duration of a test."""
    received: list[tuple[str, float, dict]] = []

    def callback(name: str, value: float, labels: dict) -> None:
        received.append((name, value, labels))

    register_metric_callback(callback)
    yield received
    unregister_metric_callback(callback)


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "store": {
            "backend": "s3",
            "bucket": "glue-test",
            "endpoint_url": "https://fly.storage.tigris.dev",
            "region": "auto",
            "cache": {"enabled": True, "capacity": 64},
        },
        "logging": {"level": "DEBUG", "format": "text"},
    }


class StalledKVStore(MemoryKVStore):
    """Memory store whose reads never complete until released."""

    def __init__(self) -> None:
        super().__init__()
        self.started: list[str] = []
        self.release = asyncio.Event()

    async def get(self, key: str) -> bytes:
        self.started.append(key)
        await self.release.wait()
        return await super().get(key)


@pytest.fixture
def stalled_store():
    """Create a memory KV store whose reads block."""
    return StalledKVStore()
