"""Expiring Token Store - Imperative Shell.

This module keeps short-lived tokens (password reset links, cached
geocoder lookups) with a time-to-live. Stores are injected into callers
rather than shared as module-level singletons, so the in-memory store can
be swapped for the Firestore-backed one without touching call sites.

Expiry rules live in src/core/tokens.py; this module owns the storage
and the background sweep thread.
"""

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from google.cloud import firestore

from src.core.tokens import TokenEntry, make_entry, is_expired, compute_expired_keys


logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Key-value store with per-entry expiry."""

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...

    def get(self, key: str) -> Any | None:
        ...

    def delete(self, key: str) -> None:
        ...

    def sweep(self) -> int:
        ...


class InMemoryTokenStore:
    """Process-local token store.

    Entries are held in a plain dict with no locking. Concurrent set/get
    from several threads is not guarded; each Cloud Function instance
    serves one request at a time.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty store.

        Args:
            clock: Returns current epoch seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, TokenEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value that expires after ttl_seconds."""
        self._entries[key] = make_entry(value, ttl_seconds, self._clock())

    def get(self, key: str) -> Any | None:
        """Return the value for key, or None if missing or expired.

        Expired entries are removed on read.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if is_expired(entry, self._clock()):
            del self._entries[key]
            return None

        return entry.value

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    def sweep(self) -> int:
        """Evict all stale entries.

        Returns:
            Number of entries evicted
        """
        expired = compute_expired_keys(self._entries, self._clock())
        for key in expired:
            self._entries.pop(key, None)

        if expired:
            logger.info("Swept %d expired tokens", len(expired))
        return len(expired)


class FirestoreTokenStore:
    """Durable token store backed by a Firestore collection.

    Document structure (one document per token, keyed by the token):
    {
        "value": <payload>,
        "expires_at": <epoch seconds>,
        "created_at": <timestamp>
    }

    Errors are logged; reads return None and writes raise, so a failed
    reset-token write is reported to the caller.
    """

    def __init__(
        self,
        client: firestore.Client,
        collection: str = "password_reset_tokens",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize with a Firestore client.

        Args:
            client: Firestore client
            collection: Collection holding token documents
            clock: Returns current epoch seconds (injectable for tests)
        """
        self._client = client
        self._collection = collection
        self._clock = clock

    def _doc_ref(self, key: str) -> Any:
        return self._client.collection(self._collection).document(key)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value that expires after ttl_seconds.

        Raises:
            Exception: If the Firestore write fails
        """
        entry = make_entry(value, ttl_seconds, self._clock())
        self._doc_ref(key).set({
            "value": entry.value,
            "expires_at": entry.expires_at,
            "created_at": datetime.now(timezone.utc),
        })
        logger.info("Stored token %s...", key[:10])

    def get(self, key: str) -> Any | None:
        """Return the value for key, or None if missing, expired or unreadable."""
        try:
            doc = self._doc_ref(key).get()
            if not doc.exists:
                return None

            data = doc.to_dict() or {}
            entry = TokenEntry(
                value=data.get("value"),
                expires_at=float(data.get("expires_at", 0)),
            )

            if is_expired(entry, self._clock()):
                logger.info("Token %s... expired, removing", key[:10])
                self.delete(key)
                return None

            return entry.value

        except Exception as e:
            logger.error("Failed to read token: %s", str(e))
            return None

    def delete(self, key: str) -> None:
        """Remove a token. Failures are logged, not raised."""
        try:
            self._doc_ref(key).delete()
        except Exception as e:
            logger.error("Failed to delete token: %s", str(e))

    def sweep(self) -> int:
        """Delete all expired token documents.

        Returns:
            Number of documents deleted (0 on error)
        """
        try:
            now = self._clock()
            stale = (
                self._client.collection(self._collection)
                .where(filter=firestore.FieldFilter("expires_at", "<", now))
                .stream()
            )

            count = 0
            for doc in stale:
                doc.reference.delete()
                count += 1

            logger.info("Swept %d expired tokens from Firestore", count)
            return count

        except Exception as e:
            logger.error("Failed to sweep expired tokens: %s", str(e))
            return 0


class TokenSweeper:
    """Periodically calls store.sweep() on a daemon thread."""

    def __init__(self, store: TokenStore, interval_seconds: float) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.store.sweep()
            except Exception:
                logger.exception("Token sweep failed")

    def start(self) -> None:
        """Start sweeping in the background. No-op if already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="token-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info("Token sweeper started (every %ss)", self.interval_seconds)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the sweep thread and wait for it to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
