"""Typed, namespaced views over byte-oriented key-value stores."""

import math
from typing import Any, Awaitable, Callable, Generic, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, PydanticSerializationUnexpectedValue

from glue_store.exceptions import BadConfigError, CantDecodeError, CantEncodeError, NotFoundError
from glue_store.observability import get_logger
from glue_store.protocols.kv_store import KVStore

T = TypeVar("T")

logger = get_logger(__name__)


def _has_non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, dict):
        return any(_has_non_finite(v) for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(_has_non_finite(v) for v in value)
    return False


class Codec(Protocol[T]):
    """Converts values to and from the bytes kept in a store."""

    def encode(self, value: T) -> bytes:
        """Serialize a value. Raises CantEncodeError on failure."""
        ...

    def decode(self, data: bytes) -> T:
        """Deserialize a value. Raises CantDecodeError on failure."""
        ...


class JSONCodec(Generic[T]):
    """Compact JSON codec backed by a pydantic TypeAdapter.

    Works for anything pydantic can validate: models, dataclasses, TypedDicts,
    builtins and containers of those. Output has no whitespace and keeps
    declared field order and field aliases, e.g. ``{"name":"test","value":42}``.
    """

    def __init__(self, type_: Any) -> None:
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def encode(self, value: T) -> bytes:
        try:
            # pydantic writes NaN and infinity as null, which no longer decodes
            if _has_non_finite(self._adapter.dump_python(value, by_alias=True, warnings="error")):
                raise CantEncodeError("can't encode NaN or infinite float as JSON")
            return self._adapter.dump_json(value, by_alias=True, warnings="error")
        except (PydanticSerializationError, PydanticSerializationUnexpectedValue) as exc:
            raise CantEncodeError(str(exc)) from exc

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as exc:
            raise CantDecodeError(str(exc)) from exc


class JSONStore(Generic[T]):
    """Store of typed values kept as JSON under a key prefix.

    A non-empty prefix turns key ``k`` into ``prefix/k`` in the underlying
    store, so several logical tables can share one bucket. With an empty
    prefix keys are passed through unchanged.

    Example:
        threads = JSONStore(store, "discourse-thread", type_=DiscourseQuestion)
        await threads.set(slug, question)
        for slug in await threads.list():
            question = await threads.get(slug)
    """

    def __init__(
        self,
        underlying: KVStore,
        prefix: str = "",
        *,
        type_: Any = None,
        codec: Codec[T] | None = None,
    ) -> None:
        """Initialize typed store.

        Args:
            underlying: Byte store holding the encoded values
            prefix: Namespace for this table's keys
            type_: Value type, encoded with JSONCodec
            codec: Explicit codec, used instead of type_

        Raises:
            BadConfigError: Unless exactly one of type_ and codec is given
        """
        if (type_ is None) == (codec is None):
            raise BadConfigError("JSONStore needs exactly one of type_ or codec")

        self.underlying = underlying
        self.prefix = prefix
        self.codec: Codec[T] = codec if codec is not None else JSONCodec(type_)

    def _full_key(self, key: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{key}"
        return key

    async def get(self, key: str) -> T:
        """Get and decode a value.

        Raises:
            NotFoundError: If the key is absent
            CantDecodeError: If the stored bytes don't decode as the value type
        """
        full_key = self._full_key(key)
        data = await self.underlying.get(full_key)
        try:
            return self.codec.decode(data)
        except CantDecodeError as exc:
            logger.debug("can't decode stored value", context={"key": full_key}, error=exc)
            raise CantDecodeError(exc.detail, operation="get", key=full_key) from exc

    async def set(self, key: str, value: T) -> None:
        """Encode and store a value.

        Raises:
            CantEncodeError: If the value can't be serialized
        """
        full_key = self._full_key(key)
        try:
            data = self.codec.encode(value)
        except CantEncodeError as exc:
            raise CantEncodeError(exc.detail, operation="set", key=full_key) from exc

        await self.underlying.set(full_key, data)

    async def delete(self, key: str) -> None:
        """Delete a value. No-op if absent."""
        await self.underlying.delete(self._full_key(key))

    async def exists(self, key: str) -> None:
        """Raise NotFoundError unless the key is present."""
        await self.underlying.exists(self._full_key(key))

    async def list(self, prefix: str = "") -> list[str]:
        """List keys in this table starting with prefix.

        Returned keys are relative to the table, e.g. with table prefix
        ``discourse`` the object ``discourse/1234`` is listed as ``1234``.
        """
        full_prefix = f"{self.prefix}/{prefix}" if self.prefix else prefix
        keys = await self.underlying.list(full_prefix)
        return [k[len(full_prefix):] if k.startswith(full_prefix) else k for k in keys]

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Get a value, or create and store it if absent.

        Not atomic: two concurrent callers may both run factory, and the last
        write wins.

        Args:
            key: Key within this table
            factory: Async function producing the value when missing

        Returns:
            Stored or newly created value
        """
        try:
            return await self.get(key)
        except NotFoundError:
            logger.debug("creating missing value", context={"key": self._full_key(key)})

        value = await factory()
        await self.set(key, value)
        return value
