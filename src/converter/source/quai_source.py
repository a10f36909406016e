"""Quai network rate source via httpx async.

Conversion rates come from the Quai JSON-RPC endpoint (``quai_quaiToQi`` and
``quai_qiToQuai``, both quoting an amount at the "latest" block). The USD
price of QUAI comes from CoinGecko's ``simple/price`` endpoint.
"""

import httpx

from converter.config import SourceSettings
from converter.exceptions import RateSourceError
from converter.logging import get_logger
from converter.models import Direction
from converter.source.base import RateSource

logger = get_logger(__name__)


class QuaiRateSource(RateSource):
    """Concrete rate source for the QUAI/QI pair.

    Holds a single ``httpx.AsyncClient`` for its lifetime; ``close()`` must
    be called on shutdown.
    """

    def __init__(
        self,
        settings: SourceSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._request_id = 0
        self._methods = {
            Direction.A_TO_B: settings.rpc_method_a_to_b,
            Direction.B_TO_A: settings.rpc_method_b_to_a,
        }

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("rate_source_closed")

    async def fetch_rate(self, direction: Direction, probe_amount: int) -> object:
        """Call the JSON-RPC conversion method for ``direction``.

        Returns the raw ``result`` field (a hex base-unit quantity).
        """
        self._request_id += 1
        payload = {
            "id": self._request_id,
            "jsonrpc": "2.0",
            "method": self._methods[direction],
            "params": [hex(probe_amount), "latest"],
        }

        data = await self._request("POST", self._settings.rpc_url, json=payload)

        if not isinstance(data, dict):
            raise RateSourceError(f"unexpected rpc payload: {data!r}")
        if data.get("error"):
            raise RateSourceError(f"rpc error: {data['error']}")
        result = data.get("result")
        if result is None:
            raise RateSourceError("rpc response missing result")

        logger.debug(
            "rate_fetched",
            direction=direction.value,
            probe=probe_amount,
            result=result,
        )
        return result

    async def fetch_usd_price(self, asset: str) -> object:
        """Fetch the USD spot price for the configured CoinGecko id.

        Only asset A has a listed price; any other asset is a failure.
        """
        if asset != self._settings.asset_a:
            raise RateSourceError(f"no USD price feed for {asset}")

        coin_id = self._settings.coingecko_id
        data = await self._request(
            "GET",
            self._settings.coingecko_url,
            params={"ids": coin_id, "vs_currencies": "usd"},
        )

        try:
            price = data[coin_id]["usd"]
        except (KeyError, TypeError) as e:
            raise RateSourceError(f"price response missing {coin_id}.usd") from e

        logger.debug("usd_price_fetched", asset=asset, price=price)
        return price

    async def _request(self, method: str, url: str, **kwargs: object) -> object:
        """Send a request and decode the JSON body, wrapping transport errors."""
        try:
            resp = await self._client.request(method, url, **kwargs)  # type: ignore[arg-type]
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise RateSourceError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise RateSourceError(f"{method} {url} returned invalid JSON") from e
