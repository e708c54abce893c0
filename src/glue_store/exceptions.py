"""Glue store exceptions."""


class StoreError(Exception):
    """Base exception for glue-store.

    Carries the store operation and key that failed so batch callers can log
    each failure meaningfully and keep going.
    """

    default_message = "store error"

    def __init__(
        self,
        message: str | None = None,
        *,
        operation: str | None = None,
        key: str | None = None,
    ) -> None:
        self.operation = operation
        self.key = key
        self.detail = message or self.default_message
        super().__init__(self._render(self.detail))

    def _render(self, message: str) -> str:
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.key is not None:
            parts.append(repr(self.key))
        if not parts:
            return f"store: {message}"
        return f"store: {' '.join(parts)}: {message}"


class NotFoundError(StoreError):
    """Key not found."""

    default_message = "key not found"


class CantDecodeError(StoreError):
    """Stored bytes can't be decoded into the value type."""

    default_message = "can't decode value"


class CantEncodeError(StoreError):
    """Value can't be encoded into the store format."""

    default_message = "can't encode value"


class BadConfigError(StoreError, ValueError):
    """Store configuration is invalid."""

    default_message = "configuration is invalid"


class BackendError(StoreError):
    """The backing store failed the request."""

    default_message = "backend request failed"
