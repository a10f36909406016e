"""Last-known-good cache for conversion rates and USD prices.

The RateCache polls a RateSource for three independent quantities (A->B
rate, B->A rate, USD price of A) and derives a fourth (USD price of B).
A failed fetch never overwrites a good value: the previous value is kept
and reported as stale until the next successful fetch.

Async-safe via asyncio.Lock. Fetches run outside the lock so a slow
source never blocks readers.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal

from converter.config import HistorySettings, SourceSettings
from converter.logging import get_logger
from converter.market_data.history import HistoryBuffer
from converter.models import (
    CachedValue,
    Direction,
    PriceSample,
    Quantity,
    QuoteStatus,
    RefreshOutcome,
)
from converter.source.base import RateSource
from converter.source.types import one_unit, parse_price, scale_base_units

logger = get_logger(__name__)


@dataclass
class _Entry:
    """Mutable cache slot for one quantity."""

    last_good: Decimal | None = None
    updated_at: float | None = None
    stale: bool = False

    def read(self) -> CachedValue:
        if self.last_good is None:
            return CachedValue(status=QuoteStatus.UNAVAILABLE)
        status = QuoteStatus.STALE if self.stale else QuoteStatus.OK
        return CachedValue(status=status, value=self.last_good, updated_at=self.updated_at)


class RateCache:
    """Rate and price cache with fallback-on-failure semantics.

    Args:
        source: Provider for rates and the USD price of asset A.
        source_settings: Asset symbols and decimal scales.
        history_settings: Price history capacity and placeholder span.
        clock: Time source returning Unix seconds. Defaults to time.time.
    """

    def __init__(
        self,
        source: RateSource,
        source_settings: SourceSettings,
        history_settings: HistorySettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        history_settings = history_settings or HistorySettings()
        self._source = source
        self._settings = source_settings
        self._clock = clock
        self._placeholder_span = history_settings.placeholder_span_seconds
        self._entries: dict[Quantity, _Entry] = {q: _Entry() for q in Quantity}
        self._histories: dict[Quantity, HistoryBuffer[PriceSample]] = {
            Quantity.PRICE_A_USD: HistoryBuffer(history_settings.capacity, clock),
            Quantity.PRICE_B_USD: HistoryBuffer(history_settings.capacity, clock),
        }
        self._last_updated: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_updated(self) -> float | None:
        """Time of the most recent successful fetch of any quantity."""
        return self._last_updated

    async def refresh(self) -> RefreshOutcome:
        """Fetch all quantities once and update the cache.

        The three fetches are independent: one failing leaves the others
        untouched. Fetch errors are logged and never propagated.
        """
        a_decimals = self._settings.asset_a_decimals
        b_decimals = self._settings.asset_b_decimals

        rate_a_to_b, rate_b_to_a, price_a = await asyncio.gather(
            self._fetch(
                Quantity.RATE_A_TO_B,
                self._fetch_rate(Direction.A_TO_B, one_unit(a_decimals), b_decimals),
            ),
            self._fetch(
                Quantity.RATE_B_TO_A,
                self._fetch_rate(Direction.B_TO_A, one_unit(b_decimals), a_decimals),
            ),
            self._fetch(Quantity.PRICE_A_USD, self._fetch_price(self._settings.asset_a)),
        )

        now = self._clock()
        fresh = {
            Quantity.RATE_A_TO_B: rate_a_to_b,
            Quantity.RATE_B_TO_A: rate_b_to_a,
            Quantity.PRICE_A_USD: price_a,
        }

        async with self._lock:
            for quantity, value in fresh.items():
                self._apply(quantity, value, now)
            self._apply(Quantity.PRICE_B_USD, self._derive_price_b(price_a), now)
            statuses = {q: self._entries[q].read().status for q in Quantity}

        outcome = RefreshOutcome(statuses=statuses, refreshed_at=now)
        if outcome.all_ok:
            logger.debug("rate_cache_refreshed")
        else:
            logger.info(
                "rate_cache_partial_refresh",
                failed=[q.value for q in outcome.failed],
            )
        return outcome

    async def read(self, quantity: Quantity) -> CachedValue:
        """Return the last good value for ``quantity`` with its staleness tag."""
        async with self._lock:
            return self._entries[quantity].read()

    async def read_all(self) -> dict[Quantity, CachedValue]:
        """Return every quantity from a single consistent view."""
        async with self._lock:
            return {q: e.read() for q, e in self._entries.items()}

    def history_buffer(self, quantity: Quantity) -> HistoryBuffer[PriceSample]:
        """Return the price history buffer for a USD price quantity.

        Raises:
            KeyError: If ``quantity`` is a rate (rates keep no history).
        """
        return self._histories[quantity]

    async def history(self, quantity: Quantity, since: float | None = None) -> list[PriceSample]:
        """Return chart-ready history for a USD price quantity.

        When no sample has been recorded yet but a last good value exists,
        returns a flat two-point series spanning the placeholder window so
        the chart has a line to draw. The series is not stored.
        """
        buffer = self._histories[quantity]
        async with self._lock:
            if since is None:
                samples = buffer.snapshot()
            else:
                samples = list(buffer.filter_since(since))
            last_good = self._entries[quantity].last_good

        if len(buffer) == 0 and last_good is not None:
            now = self._clock()
            return [
                PriceSample(timestamp=now - self._placeholder_span, price=last_good),
                PriceSample(timestamp=now, price=last_good),
            ]
        return samples

    def _derive_price_b(self, price_a: Decimal | None) -> Decimal | None:
        """price_B = price_A_usd * rate_A_to_B, using the last good rate.

        Recomputed only when the price of A was fetched this cycle. Caller
        must hold the lock and must have applied this cycle's rate first.
        """
        rate = self._entries[Quantity.RATE_A_TO_B].last_good
        if price_a is None or rate is None or rate <= 0:
            return None
        return price_a * rate

    def _apply(self, quantity: Quantity, value: Decimal | None, now: float) -> None:
        """Record one fetch result. Caller must hold the lock."""
        entry = self._entries[quantity]
        if value is None:
            entry.stale = True
            return

        entry.last_good = value
        entry.updated_at = now
        entry.stale = False
        self._last_updated = now

        history = self._histories.get(quantity)
        if history is not None:
            history.push(PriceSample(timestamp=now, price=value))

    async def _fetch(self, quantity: Quantity, fetch: Awaitable[Decimal]) -> Decimal | None:
        """Await a single fetch, converting any failure into None."""
        try:
            return await fetch
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("rate_fetch_failed", quantity=quantity.value, exc_info=True)
            return None

    async def _fetch_rate(self, direction: Direction, probe: int, target_decimals: int) -> Decimal:
        raw = await self._source.fetch_rate(direction, probe)
        # probe is one whole unit, so the scaled output is the per-unit rate
        return scale_base_units(raw, target_decimals)

    async def _fetch_price(self, asset: str) -> Decimal:
        raw = await self._source.fetch_usd_price(asset)
        return parse_price(raw)
