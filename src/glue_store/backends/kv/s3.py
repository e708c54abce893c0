"""S3-compatible object storage backend (Tigris, R2, AWS S3)."""

import asyncio
import atexit
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from glue_store.exceptions import BackendError, BadConfigError, NotFoundError
from glue_store.observability import Timer, emit_counter, emit_timer, get_logger

T = TypeVar("T")

DEFAULT_ENDPOINT_URL = "https://fly.storage.tigris.dev"
DEFAULT_REGION = "auto"

# S3 reports a missing object as NoSuchKey on GET and a bare 404 on HEAD
_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})

# Thread pool for blocking boto3 calls - configurable via environment
_max_workers = int(os.environ.get("GLUE_STORE_S3_WORKERS", "16"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)

atexit.register(_executor.shutdown, wait=False)

logger = get_logger(__name__)


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3KVStore:
    """Key-value store backed by a bucket on an S3-compatible object store.

    Keys map one-to-one onto object keys and values onto object bodies.
    Requests are not retried; a failed request surfaces as BackendError.
    Cancelling a pending call abandons the request, which finishes in its
    worker thread and has its result discarded.
    """

    def __init__(
        self,
        bucket: str | None = None,
        endpoint_url: str | None = DEFAULT_ENDPOINT_URL,
        region: str | None = DEFAULT_REGION,
        access_key: str | None = None,
        secret_key: str | None = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: Bucket holding the keys
            endpoint_url: S3 API endpoint. Defaults to Tigris.
            region: Region name. Tigris and R2 use "auto".
            access_key: Access key ID. Falls back to boto3's credential chain.
            secret_key: Secret access key, required with access_key
            connect_timeout: Connection timeout in seconds
            read_timeout: Read timeout in seconds
            client: Pre-built S3 client, mainly for tests
            **kwargs: Ignored (for compatibility with other backends)

        Raises:
            BadConfigError: If bucket is missing or credentials are incomplete
        """
        if not bucket:
            raise BadConfigError(
                "S3KVStore requires a bucket. Use 'memory' backend for development."
            )
        if bool(access_key) != bool(secret_key):
            raise BadConfigError("access_key and secret_key must be set together")

        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region

        if client is None:
            config_kwargs: dict[str, Any] = {"retries": {"total_max_attempts": 1}}
            if connect_timeout is not None:
                config_kwargs["connect_timeout"] = connect_timeout
            if read_timeout is not None:
                config_kwargs["read_timeout"] = read_timeout

            client_kwargs: dict[str, Any] = {}
            if access_key and secret_key:
                client_kwargs["aws_access_key_id"] = access_key
                client_kwargs["aws_secret_access_key"] = secret_key

            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
                config=BotoConfig(**config_kwargs),
                **client_kwargs,
            )

        self._client = client

    async def _run(
        self,
        operation: str,
        key: str | None,
        func: Callable[[], T],
    ) -> T:
        """Run a blocking boto3 call in the thread pool and translate errors."""
        labels = {"driver": "s3", "action": operation}
        emit_counter("store_iops", labels)

        loop = asyncio.get_running_loop()
        timer = Timer()
        try:
            with timer:
                return await loop.run_in_executor(_executor, func)
        except ClientError as exc:
            if operation in ("get", "exists") and _error_code(exc) in _NOT_FOUND_CODES:
                raise NotFoundError(operation=operation, key=key) from exc
            logger.debug(
                "s3 request failed",
                context={"bucket": self.bucket, "operation": operation, "key": key},
                error=exc,
            )
            raise BackendError(str(exc), operation=operation, key=key) from exc
        except BotoCoreError as exc:
            logger.debug(
                "s3 transport failed",
                context={"bucket": self.bucket, "operation": operation, "key": key},
                error=exc,
            )
            raise BackendError(str(exc), operation=operation, key=key) from exc
        finally:
            emit_timer("store_latency_ms", timer.duration_ms, labels)

    async def verify(self) -> None:
        """Check that the bucket exists and is reachable.

        Raises:
            BadConfigError: If the bucket can't be accessed
        """
        try:
            await self._run(
                "verify",
                None,
                lambda: self._client.head_bucket(Bucket=self.bucket),
            )
        except BackendError as exc:
            raise BadConfigError(
                f"can't access bucket {self.bucket!r}: {exc.__cause__}",
                operation="verify",
            ) from exc.__cause__

    async def get(self, key: str) -> bytes:
        """Get an object body by key."""

        def _get() -> bytes:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()

        return await self._run("get", key, _get)

    async def set(self, key: str, value: bytes) -> None:
        """Create or overwrite an object."""
        await self._run(
            "set",
            key,
            lambda: self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=value,
                ContentType="application/octet-stream",
            ),
        )

    async def delete(self, key: str) -> None:
        """Delete an object. S3 treats missing objects as already deleted."""
        await self._run(
            "delete",
            key,
            lambda: self._client.delete_object(Bucket=self.bucket, Key=key),
        )

    async def exists(self, key: str) -> None:
        """Raise NotFoundError unless the object exists."""
        await self._run(
            "exists",
            key,
            lambda: self._client.head_object(Bucket=self.bucket, Key=key),
        )

    async def list(self, prefix: str) -> list[str]:
        """List every object key starting with prefix, across all pages."""

        def _list_keys() -> list[str]:
            paginator = self._client.get_paginator("list_objects_v2")
            keys: list[str] = []
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
            return keys

        return await self._run("list", prefix, _list_keys)
