"""Tests for backend discovery and store composition."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from glue_store.backends.kv.memory import MemoryKVStore
from glue_store.backends.kv.s3 import S3KVStore
from glue_store.caching import LRUKVStore
from glue_store.config import CacheConfig, StoreConfig
from glue_store.exceptions import BadConfigError
from glue_store.plugins import create_kv_store, discover_backends, get_backend, open_store


class TestDiscovery:
    """Tests for entry point discovery."""

    def test_builtin_backends_registered(self):
        """Memory and S3 backends are registered entry points."""
        backends = discover_backends()
        assert backends["memory"] is MemoryKVStore
        assert backends["s3"] is S3KVStore

    def test_unknown_backend_raises(self):
        """Unknown backends list the available ones."""
        with pytest.raises(BadConfigError, match="memory"):
            get_backend("redis")

    def test_create_kv_store(self):
        """create_kv_store instantiates the backend with kwargs."""
        store = create_kv_store("memory", bucket="ignored")
        assert isinstance(store, MemoryKVStore)


class TestOpenStore:
    """Tests for open_store."""

    @pytest.mark.asyncio
    async def test_memory_with_cache(self):
        """The default config yields a cached memory store."""
        store = await open_store(StoreConfig())

        assert isinstance(store, LRUKVStore)
        assert isinstance(store.underlying, MemoryKVStore)
        assert store.cache.capacity == 512

    @pytest.mark.asyncio
    async def test_cache_disabled(self):
        """Disabling the cache returns the raw store."""
        store = await open_store(StoreConfig(cache=CacheConfig(enabled=False)))

        assert isinstance(store, MemoryKVStore)

    @pytest.mark.asyncio
    @patch("glue_store.backends.kv.s3.boto3.client")
    async def test_s3_verified_on_open(self, mock_boto_client):
        """The bucket is checked before the store is returned."""
        s3_client = MagicMock()
        mock_boto_client.return_value = s3_client

        store = await open_store(StoreConfig(backend="s3", bucket="glue", cache=CacheConfig(capacity=8)))

        s3_client.head_bucket.assert_called_once_with(Bucket="glue")
        assert isinstance(store, LRUKVStore)
        assert isinstance(store.underlying, S3KVStore)
        assert store.cache.capacity == 8

    @pytest.mark.asyncio
    @patch("glue_store.backends.kv.s3.boto3.client")
    async def test_s3_bad_bucket_fails_on_open(self, mock_boto_client):
        """A missing bucket surfaces as BadConfigError at startup."""
        s3_client = MagicMock()
        s3_client.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "NoSuchBucket", "Message": "nope"}}, "HeadBucket"
        )
        mock_boto_client.return_value = s3_client

        with pytest.raises(BadConfigError):
            await open_store(StoreConfig(backend="s3", bucket="missing"))

    @pytest.mark.asyncio
    @patch("glue_store.backends.kv.s3.boto3.client")
    async def test_s3_verify_skipped(self, mock_boto_client):
        """verify=False skips the bucket check."""
        s3_client = MagicMock()
        mock_boto_client.return_value = s3_client

        await open_store(StoreConfig(backend="s3", bucket="glue", verify=False))

        s3_client.head_bucket.assert_not_called()

    @pytest.mark.asyncio
    async def test_s3_without_bucket(self):
        """The S3 backend refuses to start without a bucket."""
        with pytest.raises(BadConfigError, match="bucket"):
            await open_store(StoreConfig(backend="s3"))
