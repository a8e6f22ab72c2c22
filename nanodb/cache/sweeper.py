"""
Expiration Sweeper Module

Background task that periodically removes expired keys from the store,
so keys that are never read again do not hold memory forever.
"""

import asyncio
import logging
from typing import Optional

from .store import ExpiringStore
from ..config.settings import settings

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """
    Periodic active expiration for an ExpiringStore.

    One sweeper runs per server process, shared by all connections.

    Usage:
        sweeper = ExpirationSweeper(store, interval=1.0)
        sweeper.start()      # requires a running event loop
        ...
        await sweeper.stop()

    Attributes:
        store: The store to sweep
        interval: Seconds between sweeps
    """

    def __init__(self, store: ExpiringStore, interval: float = None):
        self.store = store
        self.interval = interval if interval is not None else settings.SWEEP_INTERVAL
        if self.interval <= 0:
            raise ValueError("interval must be positive")

        self._task: Optional[asyncio.Task] = None
        self._total_removed = 0

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.is_running():
            return
        self._task = asyncio.create_task(self._run(), name="nanodb-sweeper")
        logger.debug(f"Expiration sweeper started (interval={self.interval}s)")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
        logger.debug("Expiration sweeper stopped")

    def is_running(self) -> bool:
        """Check if the sweep loop is active."""
        return self._task is not None and not self._task.done()

    def sweep(self) -> int:
        """Run one sweep immediately and return the number of keys removed."""
        removed = self.store.cleanup_expired()
        if removed:
            self._total_removed += removed
            logger.info(f"Sweeper removed {removed} expired key(s)")
        return removed

    @property
    def total_removed(self) -> int:
        """Keys removed by this sweeper since it was created."""
        return self._total_removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.sweep()
