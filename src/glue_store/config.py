"""Configuration loading with environment variable substitution."""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from glue_store.caching import DEFAULT_CAPACITY
from glue_store.observability import LogLevel, configure_logging

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} patterns with environment variables."""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable {var_name} is not set")
            return env_value

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


class CacheConfig(BaseModel):
    """Read cache in front of the raw store."""

    enabled: bool = True
    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)


class StoreConfig(BaseModel):
    """Raw store backend configuration."""

    backend: str = "memory"  # memory | s3
    # Backend-specific settings
    bucket: str | None = None
    endpoint_url: str | None = "https://fly.storage.tigris.dev"
    region: str | None = "auto"
    access_key: str | None = None
    secret_key: str | None = None
    connect_timeout: float | None = None
    read_timeout: float | None = None
    verify: bool = True  # Check the bucket when opening the store
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def backend_kwargs(self) -> dict[str, Any]:
        """Settings passed to the backend constructor."""
        return self.model_dump(exclude={"backend", "verify", "cache"})


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: str = "json"  # json | text


class Config(BaseModel):
    """Main configuration for glue-store."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        with path.open() as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        data = substitute_env_vars(data or {})
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Load configuration from a dictionary."""
        data = substitute_env_vars(data)
        return cls.model_validate(data)

    def apply_logging(self) -> None:
        """Configure the package logger from the logging section."""
        configure_logging(level=self.logging.level, format=self.logging.format)
