"""Flow- and size-aware slippage model.

Slippage (in percentage points) is built from three parts and then capped
per direction:

    base            per-direction floor
    flow_adjustment (1 - same_direction_share) * K_flow
    size_impact     min(amount / size_divisor, size_cap)

    slippage = min(base + flow_adjustment + size_impact, ceiling[direction])

Heavy recent flow in the requested direction lowers the flow adjustment;
with no observed flow at all the adjustment is at its maximum.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from converter.config import SlippageSettings
from converter.models import Direction, FlowTotals

_ONE = Decimal("1")
_ZERO = Decimal("0")


def flow_ratio(direction: Direction, totals: FlowTotals) -> Decimal:
    """Share of windowed volume moving in ``direction``.

    The denominator is floored at 1, so no flow (or tiny flow) yields a
    small or zero share rather than a division error.
    """
    total = totals.total
    if total == _ZERO:
        return _ZERO
    return totals.in_direction(direction) / max(total, _ONE)


def compute_slippage(
    direction: Direction,
    amount: Decimal,
    totals: FlowTotals,
    settings: SlippageSettings,
) -> Decimal:
    """Compute slippage percent for a conversion request.

    Args:
        direction: Requested conversion direction.
        amount: Requested input amount in whole units of the source asset.
        totals: Windowed flow totals (normally the last hour).
        settings: Floors, ceilings and scaling constants.

    Returns:
        Decimal percentage in ``[0, ceiling[direction]]``. Non-positive
        amounts return 0; callers are expected to reject them earlier.
    """
    if amount <= _ZERO:
        return _ZERO

    if direction is Direction.A_TO_B:
        base = settings.floor_a_to_b
        ceiling = settings.ceiling_a_to_b
    else:
        base = settings.floor_b_to_a
        ceiling = settings.ceiling_b_to_a

    flow_adjustment = (_ONE - flow_ratio(direction, totals)) * settings.flow_adjustment_cap
    size_impact = min(amount / settings.size_divisor, settings.size_cap)

    return max(min(base + flow_adjustment + size_impact, ceiling), _ZERO)
