"""Base-unit decoding helpers for rate source payloads.

All values use Decimal. Never use float for rates or prices.
"""

from decimal import Decimal, InvalidOperation

from converter.exceptions import RateSourceError


def parse_base_units(raw: object) -> int:
    """Decode a raw base-unit amount into a non-negative integer.

    Accepts an int, a ``0x``-prefixed hex string (JSON-RPC quantities) or a
    plain decimal-integer string.

    Raises:
        RateSourceError: If the value is malformed or negative.
    """
    if isinstance(raw, bool):
        raise RateSourceError(f"malformed base-unit amount: {raw!r}")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        try:
            if text.lower().startswith("0x"):
                value = int(text, 16)
            else:
                value = int(text, 10)
        except ValueError as e:
            raise RateSourceError(f"malformed base-unit amount: {raw!r}") from e
    else:
        raise RateSourceError(f"malformed base-unit amount: {raw!r}")

    if value < 0:
        raise RateSourceError(f"negative base-unit amount: {raw!r}")
    return value


def scale_base_units(raw: object, decimals: int) -> Decimal:
    """Convert a raw base-unit amount into whole units.

    Example: ``scale_base_units("0xde0b6b3a7640000", 18) == Decimal("1")``.
    """
    return Decimal(parse_base_units(raw)).scaleb(-decimals)


def parse_price(raw: object) -> Decimal:
    """Decode a USD price into a finite, non-negative Decimal.

    Raises:
        RateSourceError: If the value is missing, non-numeric or negative.
    """
    if raw is None or isinstance(raw, bool):
        raise RateSourceError(f"malformed price: {raw!r}")
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, ValueError) as e:
        raise RateSourceError(f"malformed price: {raw!r}") from e
    if not price.is_finite() or price < 0:
        raise RateSourceError(f"invalid price: {raw!r}")
    return price


def one_unit(decimals: int) -> int:
    """Base units making up one whole unit of an asset (the canonical probe amount)."""
    return 10**decimals
