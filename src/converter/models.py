"""Shared data models for the converter engine.

CRITICAL: All rates, prices and amounts use Decimal. Never use float for
monetary values. Timestamps are Unix seconds as float, matching time.time().
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from converter.exceptions import NoDataAvailableError


class Direction(str, Enum):
    """Conversion direction between asset A (QUAI) and asset B (QI)."""

    A_TO_B = "quai_to_qi"
    B_TO_A = "qi_to_quai"


class Quantity(str, Enum):
    """Values tracked by the rate cache."""

    RATE_A_TO_B = "rate_a_to_b"
    RATE_B_TO_A = "rate_b_to_a"
    PRICE_A_USD = "price_a_usd"  # fetched
    PRICE_B_USD = "price_b_usd"  # derived, never fetched

    @classmethod
    def rate_for(cls, direction: Direction) -> Quantity:
        """Return the rate quantity quoting the given direction."""
        if direction is Direction.A_TO_B:
            return cls.RATE_A_TO_B
        return cls.RATE_B_TO_A


class QuoteStatus(str, Enum):
    """Freshness tag attached to every cache read."""

    OK = "ok"
    STALE = "stale"  # last refresh failed, value carried over
    UNAVAILABLE = "unavailable"  # never successfully observed


@dataclass(frozen=True)
class PriceSample:
    """A single point of a USD price series."""

    timestamp: float
    price: Decimal


@dataclass(frozen=True)
class FlowRecord:
    """Volume of one priced conversion request."""

    timestamp: float
    direction: Direction
    volume: Decimal


@dataclass(frozen=True)
class FlowTotals:
    """Summed flow volume per direction over a time window."""

    total_a_to_b: Decimal = Decimal("0")
    total_b_to_a: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.total_a_to_b + self.total_b_to_a

    def in_direction(self, direction: Direction) -> Decimal:
        if direction is Direction.A_TO_B:
            return self.total_a_to_b
        return self.total_b_to_a


@dataclass(frozen=True)
class CachedValue:
    """Tagged result of a rate cache read.

    Callers must distinguish a genuine zero from "no data yet": when
    ``status`` is UNAVAILABLE the ``value`` is a placeholder zero and
    ``require()`` raises.
    """

    status: QuoteStatus
    value: Decimal = Decimal("0")
    updated_at: float | None = None

    @property
    def is_stale(self) -> bool:
        return self.status is QuoteStatus.STALE

    @property
    def is_available(self) -> bool:
        return self.status is not QuoteStatus.UNAVAILABLE

    def require(self) -> Decimal:
        """Return the value, raising NoDataAvailableError when there is none."""
        if not self.is_available:
            raise NoDataAvailableError("no successful observation yet")
        return self.value


@dataclass
class RefreshOutcome:
    """Per-quantity status after one refresh cycle."""

    statuses: dict[Quantity, QuoteStatus]
    refreshed_at: float

    @property
    def all_ok(self) -> bool:
        return all(s is QuoteStatus.OK for s in self.statuses.values())

    @property
    def failed(self) -> list[Quantity]:
        """Quantities that did not refresh this cycle."""
        return [q for q, s in self.statuses.items() if s is not QuoteStatus.OK]


@dataclass
class ConversionResult:
    """Priced conversion quote returned to the renderer."""

    direction: Direction
    amount_in: Decimal
    amount_out: Decimal
    effective_rate: Decimal
    slippage_percent: Decimal
    status: QuoteStatus
    rate_updated_at: float | None = None

    @property
    def is_available(self) -> bool:
        return self.status is not QuoteStatus.UNAVAILABLE

    @classmethod
    def unavailable(cls, direction: Direction, amount_in: Decimal) -> ConversionResult:
        """Zeroed result for a direction whose rate was never observed."""
        return cls(
            direction=direction,
            amount_in=amount_in,
            amount_out=Decimal("0"),
            effective_rate=Decimal("0"),
            slippage_percent=Decimal("0"),
            status=QuoteStatus.UNAVAILABLE,
        )
