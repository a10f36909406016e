"""Fixed-interval poller driving RateCache refreshes.

Uses REST polling. Rates and prices move slowly relative to the display,
so a 30-second cadence is sufficient. The poller owns no state of its own;
it only schedules ``RateCache.refresh()``.
"""

import asyncio

from converter.logging import get_logger
from converter.market_data.rate_cache import RateCache
from converter.models import RefreshOutcome

logger = get_logger(__name__)


class RatePoller:
    """Refreshes a RateCache in the background at a fixed interval.

    A refresh still in flight when the next interval elapses is allowed
    to complete; refreshes are never cancelled mid-fetch except on stop().
    """

    def __init__(self, cache: RateCache, interval: float = 30.0) -> None:
        self._cache = cache
        self._interval = interval
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._cycles = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cycles(self) -> int:
        """Number of completed poll cycles."""
        return self._cycles

    async def start(self) -> None:
        """Begin polling in the background."""
        if self._running:
            logger.warning("rate_poller_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("rate_poller_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the poller gracefully."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("rate_poller_stopped", cycles=self._cycles)

    async def poll_once(self) -> RefreshOutcome:
        """Run a single refresh cycle."""
        outcome = await self._cache.refresh()
        self._cycles += 1
        return outcome

    async def _poll_loop(self) -> None:
        """Main loop: refresh immediately, then every interval."""
        while self._running:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.warning("rate_poller_cycle_error", exc_info=True)
            if self._running:
                await asyncio.sleep(self._interval)
