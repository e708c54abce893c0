"""Backend discovery via Python entry points and store composition."""

from importlib.metadata import entry_points
from typing import Any

from glue_store.caching import LRUKVStore
from glue_store.config import StoreConfig
from glue_store.exceptions import BadConfigError
from glue_store.observability import get_logger
from glue_store.protocols import KVStore

KV_BACKEND_GROUP = "glue_store.backends.kv"

logger = get_logger(__name__)


def discover_backends(group: str = KV_BACKEND_GROUP) -> dict[str, Any]:
    """Discover all registered backends for a given group.

    Args:
        group: Entry point group name

    Returns:
        Dictionary mapping backend names to their classes
    """
    eps = entry_points(group=group)
    return {ep.name: ep.load() for ep in eps}


def get_backend(name: str) -> Any:
    """Get a KV backend class by name.

    Args:
        name: The backend name (e.g., "memory", "s3")

    Returns:
        The backend class

    Raises:
        BadConfigError: If the backend is not found
    """
    backends = discover_backends()
    if name not in backends:
        available = ", ".join(sorted(backends.keys())) or "(none)"
        raise BadConfigError(f"unknown KV backend {name!r}. Available: {available}")
    return backends[name]


def create_kv_store(backend: str, **kwargs: Any) -> KVStore:
    """Create a raw KVStore instance.

    Args:
        backend: The backend name (e.g., "memory", "s3")
        **kwargs: Backend-specific configuration

    Returns:
        A KVStore implementation
    """
    cls = get_backend(backend)
    return cls(**kwargs)


async def open_store(config: StoreConfig) -> KVStore:
    """Build the raw store described by config, wrapped in the read cache.

    Backends that can check their configuration (S3KVStore.verify) are
    checked here when config.verify is set, so a bad bucket fails at startup
    rather than on the first read.

    Raises:
        BadConfigError: If the backend is unknown or misconfigured
    """
    store = create_kv_store(config.backend, **config.backend_kwargs())

    verify = getattr(store, "verify", None)
    if config.verify and verify is not None:
        await verify()

    logger.info(
        "opened store",
        context={
            "backend": config.backend,
            "bucket": config.bucket,
            "cache": config.cache.enabled,
        },
    )

    if config.cache.enabled:
        return LRUKVStore(store, capacity=config.cache.capacity)
    return store
