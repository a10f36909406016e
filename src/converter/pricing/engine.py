"""Conversion engine -- prices a requested conversion from cached rates.

Combines the RateCache (current rate for the requested direction), the
FlowTracker (last hour of flow) and the slippage model into a single
quote. Every successfully priced request is recorded as flow, so sustained
one-directional demand lowers slippage in that direction and raises it in
the opposite one.

The two directional rates are fetched independently. The engine never
derives one from the inverse of the other.
"""

from decimal import Decimal, InvalidOperation

from converter.config import FlowSettings, SlippageSettings
from converter.exceptions import InvalidInputError, NoDataAvailableError
from converter.flow.tracker import FlowTracker
from converter.logging import get_logger
from converter.market_data.rate_cache import RateCache
from converter.models import ConversionResult, Direction, Quantity
from converter.pricing.slippage import compute_slippage

logger = get_logger(__name__)

_HUNDRED = Decimal("100")

# Far above any real supply; keeps amount * rate inside the Decimal context range
MAX_AMOUNT = Decimal("1e30")


def parse_direction(value: Direction | str) -> Direction:
    """Coerce a direction or its string value into a Direction.

    Raises:
        InvalidInputError: If the value names no known direction.
    """
    if isinstance(value, Direction):
        return value
    try:
        return Direction(value)
    except ValueError as e:
        raise InvalidInputError(f"unsupported direction: {value!r}") from e


def parse_amount(value: Decimal | int | float | str) -> Decimal:
    """Coerce an input amount into a finite, positive Decimal.

    Raises:
        InvalidInputError: If the value is malformed, non-finite or <= 0,
            or larger than MAX_AMOUNT.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"malformed amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError(f"malformed amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidInputError(f"amount must be finite, got {value!r}")
    if amount <= 0:
        raise InvalidInputError(f"amount must be positive, got {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidInputError(f"amount exceeds {MAX_AMOUNT}, got {value!r}")
    return amount


class ConversionEngine:
    """Answers "if I convert X now, what do I receive?".

    Args:
        cache: Rate cache refreshed by the poller.
        flow: Flow tracker fed by this engine's priced conversions.
        slippage_settings: Slippage model calibration.
        flow_settings: Window fed to the slippage model.
    """

    def __init__(
        self,
        cache: RateCache,
        flow: FlowTracker,
        slippage_settings: SlippageSettings | None = None,
        flow_settings: FlowSettings | None = None,
    ) -> None:
        self._cache = cache
        self._flow = flow
        self._slippage = slippage_settings or SlippageSettings()
        self._window = (flow_settings or FlowSettings()).window_seconds

    @property
    def cache(self) -> RateCache:
        return self._cache

    @property
    def flow(self) -> FlowTracker:
        return self._flow

    async def convert(
        self,
        direction: Direction | str,
        amount_in: Decimal | int | float | str,
    ) -> ConversionResult:
        """Price a conversion of ``amount_in`` in ``direction``.

        Input is validated before any state is touched. When the requested
        rate has never been observed (or is zero) an unavailable result is
        returned and no flow is recorded.

        Raises:
            InvalidInputError: On unknown direction or non-positive amount.
        """
        direction = parse_direction(direction)
        amount = parse_amount(amount_in)

        quote = await self._cache.read(Quantity.rate_for(direction))
        if not quote.is_available or quote.value <= 0:
            logger.info("conversion_unavailable", direction=direction.value)
            return ConversionResult.unavailable(direction, amount)

        raw_out = amount * quote.value
        totals = self._flow.windowed_totals(self._window)
        slippage = compute_slippage(direction, amount, totals, self._slippage)

        amount_out = raw_out * (1 - slippage / _HUNDRED)
        effective_rate = amount_out / amount

        self._flow.record(direction, amount)

        logger.info(
            "conversion_priced",
            direction=direction.value,
            amount_in=str(amount),
            amount_out=str(amount_out),
            slippage=str(slippage),
            stale=quote.is_stale,
        )
        return ConversionResult(
            direction=direction,
            amount_in=amount,
            amount_out=amount_out,
            effective_rate=effective_rate,
            slippage_percent=slippage,
            status=quote.status,
            rate_updated_at=quote.updated_at,
        )

    async def market_spread(self) -> Decimal | None:
        """Percent gap between the A->B rate and the inverse of the B->A rate.

        ``expected = 1 / rate_b_to_a`` is what a lossless round trip would
        give; the spread is ``(expected - rate_a_to_b) / expected * 100``.
        Returns None when either rate is unavailable or zero.
        """
        try:
            rate_a_to_b = (await self._cache.read(Quantity.RATE_A_TO_B)).require()
            rate_b_to_a = (await self._cache.read(Quantity.RATE_B_TO_A)).require()
        except NoDataAvailableError:
            return None

        if rate_b_to_a == 0:
            return None
        expected = 1 / rate_b_to_a
        return (expected - rate_a_to_b) / expected * _HUNDRED
