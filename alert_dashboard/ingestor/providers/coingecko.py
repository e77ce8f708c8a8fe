"""CoinGecko provider for coin metadata and spot prices."""
import logging
from typing import Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError as SchemaError

from ...shared.exceptions import CollaboratorUnavailable
from ...shared.metrics import FETCH_ERRORS, FETCH_LATENCY, track_latency
from ...shared.schemas import Coin
from .base import BaseMarketProvider

logger = logging.getLogger(__name__)


class CoinGeckoProvider(BaseMarketProvider):
    """Fetches cryptocurrency metadata and prices from the CoinGecko API."""

    BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(
        self,
        base_url: str = BASE_URL,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-pro-api-key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "coingecko"

    async def _get_json(self, path: str, params: dict, endpoint: str):
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"CoinGecko API error on {endpoint}: {e}")
            FETCH_ERRORS.labels(endpoint=endpoint).inc()
            raise CollaboratorUnavailable(f"CoinGecko {endpoint} request failed", endpoint) from e

    @track_latency(FETCH_LATENCY, labels={"endpoint": "markets"})
    async def fetch_top_coins(self, limit: int) -> List[Coin]:
        """Fetch the top `limit` coins ordered by market cap.

        Malformed rows are skipped; a payload with no usable row at all is an error.
        """
        data = await self._get_json(
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": limit,
                "page": 1,
            },
            endpoint="markets",
        )
        if not isinstance(data, list):
            FETCH_ERRORS.labels(endpoint="markets").inc()
            raise CollaboratorUnavailable("CoinGecko markets payload is not a list", "markets")

        coins: List[Coin] = []
        for row in data:
            try:
                coins.append(Coin.model_validate(row))
            except SchemaError as e:
                logger.warning(f"Skipping malformed CoinGecko market row: {e}")

        if data and not coins:
            FETCH_ERRORS.labels(endpoint="markets").inc()
            raise CollaboratorUnavailable("CoinGecko markets payload is malformed", "markets")

        logger.info(f"Fetched {len(coins)} coins from CoinGecko")
        return coins

    @track_latency(FETCH_LATENCY, labels={"endpoint": "simple_price"})
    async def fetch_prices(self, coin_ids: Sequence[str]) -> Dict[str, float]:
        """Fetch USD prices for every id in one call.

        Ids missing from the response, or rows without a numeric ``usd``
        field, are left out of the result.
        """
        if not coin_ids:
            return {}

        data = await self._get_json(
            "/simple/price",
            params={"ids": ",".join(coin_ids), "vs_currencies": "usd"},
            endpoint="simple_price",
        )
        if not isinstance(data, dict):
            FETCH_ERRORS.labels(endpoint="simple_price").inc()
            raise CollaboratorUnavailable("CoinGecko price payload is not an object", "simple_price")

        prices: Dict[str, float] = {}
        for coin_id, row in data.items():
            price = row.get("usd") if isinstance(row, dict) else None
            if isinstance(price, bool) or not isinstance(price, (int, float)):
                continue
            prices[coin_id] = float(price)

        logger.debug(f"Fetched {len(prices)}/{len(coin_ids)} prices from CoinGecko")
        return prices

    async def aclose(self) -> None:
        await self._client.aclose()
