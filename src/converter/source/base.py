"""Abstract rate source interface.

Defines the contract the rate cache consumes. Cache and pricing code depend
only on this interface, keeping RPC and price-API details isolated in the
concrete implementation.
"""

from abc import ABC, abstractmethod

from converter.models import Direction


class RateSource(ABC):
    """Abstract base class for exchange-rate and price providers.

    Implementations raise RateSourceError on any failure; the cache turns
    that into its fallback path.
    """

    @abstractmethod
    async def fetch_rate(self, direction: Direction, probe_amount: int) -> object:
        """Quote ``probe_amount`` base units of the source asset.

        Returns the target amount in base units, in any encoding accepted by
        ``parse_base_units`` (int, hex string or decimal string).
        """
        ...

    @abstractmethod
    async def fetch_usd_price(self, asset: str) -> object:
        """Return the USD spot price of ``asset`` as a number or numeric string."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
