"""Expiring token logic - Pure functions.

This module holds the expiry rules for short-lived tokens (password reset
links, cached geocoder lookups). Timestamps are plain epoch seconds passed
in by the caller, so every function here is deterministic.

Note: Storage of the entries is handled by the imperative shell
(src/shell/token_store.py). This module only contains the pure logic.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TokenEntry:
    """A stored value with an absolute expiry.

    Attributes:
        value: The stored payload
        expires_at: Epoch seconds after which the entry is stale
    """
    value: Any
    expires_at: float


def make_entry(value: Any, ttl_seconds: float, now: float) -> TokenEntry:
    """Create an entry that expires ttl_seconds from now.

    Pure function.
    """
    return TokenEntry(value=value, expires_at=now + ttl_seconds)


def is_expired(entry: TokenEntry, now: float) -> bool:
    """Check if an entry is stale.

    Pure function. An entry is still valid at exactly its expiry time.
    """
    return entry.expires_at < now


def compute_expired_keys(
    entries: Mapping[str, TokenEntry],
    now: float,
) -> set[str]:
    """Compute which keys hold stale entries.

    Pure function.

    Args:
        entries: Current entries by key
        now: Current time in epoch seconds

    Returns:
        Keys that can be evicted
    """
    return {key for key, entry in entries.items() if is_expired(entry, now)}
