"""Cache module for NanoDB."""

from .store import ExpiringStore, StoredEntry
from .sweeper import ExpirationSweeper

__all__ = ["ExpiringStore", "StoredEntry", "ExpirationSweeper"]
