"""
Expiring Store Module

This module implements the shared in-memory key-value storage.

Every entry may carry an absolute expiration instant. Expiration is
enforced in two ways:
- Lazily: get() removes an expired entry when it is read
- Actively: cleanup_expired() removes every expired entry in one pass
  (called periodically by ExpirationSweeper)

All access to the underlying dict goes through a single lock, so the
store can be shared by every connection handler, the sweeper and any
worker threads.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class StoredEntry:
    """
    A value held by the store.

    Attributes:
        value: Opaque string payload
        expires_at: Absolute instant on the store clock, None = no expiration
    """
    value: str
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        """Check whether the entry is no longer visible at `now`."""
        return self.expires_at is not None and self.expires_at <= now


class ExpiringStore:
    """
    In-memory key-value store with per-entry expiration.

    Operations:
    - set: Insert or overwrite a key, optionally with a TTL
    - get: Retrieve a value, dropping it if it has expired
    - delete: Remove a key
    - cleanup_expired: Remove all expired keys (the periodic sweep)

    Internal Storage:
        Plain dict guarded by one threading.Lock.
        Format: key -> StoredEntry

    There is no per-key locking. Each operation holds the lock for the
    whole lookup/insert/scan, so operations are linearizable with
    respect to each other.

    Attributes:
        clock: Callable returning the current time in seconds
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the store.

        Args:
            clock: Time source (default time.monotonic). Tests inject a
                   fake clock to control expiration.
        """
        self.clock = clock
        self._store: Dict[str, StoredEntry] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        """
        Insert or overwrite a key-value pair.

        Args:
            key: The key to store
            value: The value to associate with the key
            ttl: Time-to-live in seconds, None = no expiration.
                 Zero or a negative ttl stores an already expired entry.

        Re-setting a key always replaces its expiration policy, so a set
        without ttl clears a previous TTL.
        """
        with self._lock:
            expires_at = self.clock() + ttl if ttl is not None else None
            self._store[key] = StoredEntry(value=value, expires_at=expires_at)

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value for a given key.

        Args:
            key: The key to look up

        Returns:
            The value if found and not expired, None otherwise.
            An expired entry is removed as a side effect.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            if entry.is_expired(self.clock()):
                del self._store[key]
                logger.debug(f"Key '{key}' has expired")
                return None

            return entry.value

    def delete(self, key: str) -> bool:
        """
        Delete a key-value pair.

        Args:
            key: The key to delete

        Returns:
            True if a live key was deleted, False if the key didn't exist
            or had already expired
        """
        with self._lock:
            entry = self._store.pop(key, None)
            if entry is None:
                return False
            return not entry.is_expired(self.clock())

    def cleanup_expired(self) -> int:
        """
        Remove all expired keys from the store (active expiration).

        Returns:
            Number of keys removed
        """
        with self._lock:
            now = self.clock()
            expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
            for key in expired:
                del self._store[key]
                logger.debug(f"Key '{key}' expired and removed")
            return len(expired)

    def size(self) -> int:
        """
        Get the current number of keys in the store.

        Note: This may include expired keys that haven't been cleaned up yet.
        """
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Remove all keys from the store."""
        with self._lock:
            self._store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Total keys in store
            - expired_keys: Count of expired (but not yet cleaned) keys
            - active_keys: Count of non-expired keys
        """
        with self._lock:
            now = self.clock()
            total = len(self._store)
            expired = sum(1 for entry in self._store.values() if entry.is_expired(now))

        return {
            "total_keys": total,
            "expired_keys": expired,
            "active_keys": total - expired,
        }
