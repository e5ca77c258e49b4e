"""
Hashing utilities for stable identifiers of computed results.
"""

from __future__ import annotations

import hashlib
from typing import Iterable


def sha256_hash(content: str | bytes) -> str:
    """Return the SHA-256 hex digest of the given content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def fingerprint_ids(ids: Iterable[str], length: int = 16) -> str:
    """Order-independent short fingerprint of a set of ids."""
    return sha256_hash("|".join(sorted(ids)))[:length]
