"""Key derivation helpers."""

import hashlib


def sha256sum(text: str) -> str:
    """Hex SHA-256 of text, used to turn arbitrary IDs (feed item URLs) into keys."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
