"""Content hashing for explanation change detection"""

import hashlib


def sha256(content: str) -> str:
    """Hex SHA-256 of the UTF-8 encoded content; fits the String(64) hash columns."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
