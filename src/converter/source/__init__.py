"""Rate source layer -- Quai JSON-RPC and CoinGecko integration via httpx."""

from converter.source.base import RateSource
from converter.source.quai_source import QuaiRateSource
from converter.source.types import parse_base_units, parse_price, scale_base_units

__all__ = [
    "QuaiRateSource",
    "RateSource",
    "parse_base_units",
    "parse_price",
    "scale_base_units",
]
