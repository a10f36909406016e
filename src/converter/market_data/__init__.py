"""Market data layer -- rate caching, price history, and refresh polling."""

from converter.market_data.history import HistoryBuffer
from converter.market_data.poller import RatePoller
from converter.market_data.rate_cache import RateCache

__all__ = ["HistoryBuffer", "RatePoller", "RateCache"]
