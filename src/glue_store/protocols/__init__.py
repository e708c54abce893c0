"""Protocol interfaces for pluggable backends."""

from glue_store.protocols.kv_store import KVStore

__all__ = [
    "KVStore",
]
