import hashlib
import re

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Trim, lowercase and collapse internal whitespace. Idempotent."""
    return _WHITESPACE.sub(" ", text.strip().lower())


def fingerprint(text: str) -> str:
    """SHA-256 hex digest of the normalized text; the exact-cache key."""
    return hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()
