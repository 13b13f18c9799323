"""Background task that evicts participants who stopped sending heartbeats.

The reaper is started in the application lifespan and cancelled on
shutdown. Cancelling mid-sweep is acceptable: eviction is idempotent and
anything missed is retried on the next tick of a future process.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from app.clock import SystemClock

from .service import PresenceRegistry

logger = logging.getLogger(__name__)


class InactivityReaper:
    """Periodically calls ``PresenceRegistry.evict_stale``."""

    def __init__(
        self,
        registry: PresenceRegistry,
        clock=None,
        threshold_ms: int = 10_000,
        interval_ms:  int = 15_000,
    ) -> None:
        self._registry     = registry
        self._clock        = clock or SystemClock()
        self._threshold_ms = threshold_ms
        self._interval_ms  = interval_ms
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "InactivityReaper started (threshold=%sms, interval=%sms)",
            self._threshold_ms, self._interval_ms,
        )

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("InactivityReaper stopped")

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_ms / 1000)
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("InactivityReaper sweep failed; retrying next tick")

    async def tick(self) -> Set[str]:
        """Run a single eviction pass."""
        evicted = await self._registry.evict_stale(
            self._clock.now_ms(), self._threshold_ms
        )
        if evicted:
            logger.info("InactivityReaper sweep: evicted %d participant(s)", len(evicted))
        return evicted
