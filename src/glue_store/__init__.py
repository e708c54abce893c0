"""Glue Store - typed, cached key-value storage over object stores."""

from glue_store.caching import LRUCache, LRUKVStore
from glue_store.config import Config, StoreConfig
from glue_store.exceptions import (
    BackendError,
    BadConfigError,
    CantDecodeError,
    CantEncodeError,
    NotFoundError,
    StoreError,
)
from glue_store.observability import (
    LogLevel,
    RunContext,
    StructuredLogger,
    Timer,
    configure_logging,
    emit_counter,
    emit_metric,
    emit_timer,
    get_logger,
    register_metric_callback,
)
from glue_store.plugins import create_kv_store, open_store
from glue_store.protocols import KVStore
from glue_store.typed import Codec, JSONCodec, JSONStore

__version__ = "0.1.0"
__all__ = [
    # Stores
    "Codec",
    "JSONCodec",
    "JSONStore",
    "KVStore",
    "LRUCache",
    "LRUKVStore",
    "create_kv_store",
    "open_store",
    # Config
    "Config",
    "StoreConfig",
    # Errors
    "BackendError",
    "BadConfigError",
    "CantDecodeError",
    "CantEncodeError",
    "NotFoundError",
    "StoreError",
    # Observability
    "LogLevel",
    "RunContext",
    "StructuredLogger",
    "Timer",
    "configure_logging",
    "emit_counter",
    "emit_metric",
    "emit_timer",
    "get_logger",
    "register_metric_callback",
]
