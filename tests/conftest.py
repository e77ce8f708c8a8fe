# tests/conftest.py
import asyncio
from typing import Dict, List, Optional, Sequence

import httpx
import pytest
import pytest_asyncio

from alert_dashboard.gateway.dashboard import Dashboard
from alert_dashboard.gateway.db import DurableStore, create_db_engine, get_session_factory, init_db
from alert_dashboard.ingestor.providers.base import BaseMarketProvider
from alert_dashboard.ingestor.providers.coingecko import CoinGeckoProvider
from alert_dashboard.shared.config import PollerSettings, Settings, StorageSettings
from alert_dashboard.shared.exceptions import CollaboratorUnavailable
from alert_dashboard.shared.schemas import Coin
from alert_dashboard.shared.storage import SessionStore

TEST_EMAIL = "trader@example.com"
TEST_PASSWORD = "hodl1234"

MARKET_ROWS = [
    {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "image": "https://img.test/bitcoin.png",
        "current_price": 64000.5,
        "market_cap": 1260000000000,
    },
    {
        "id": "ethereum",
        "symbol": "eth",
        "name": "Ethereum",
        "image": "https://img.test/ethereum.png",
        "current_price": 3100.25,
        "market_cap": 372000000000,
    },
    {
        "id": "dogecoin",
        "symbol": "doge",
        "name": "Dogecoin",
        "image": "https://img.test/dogecoin.png",
        "current_price": 0.12,
        "market_cap": 17000000000,
    },
]


class MarketStub:
    """In-memory stand-in for the CoinGecko REST API."""

    def __init__(self):
        self.markets: List[dict] = list(MARKET_ROWS)
        self.prices: Dict[str, float] = {"bitcoin": 64000.5, "ethereum": 3100.25, "dogecoin": 0.12}
        self.markets_status = 200
        self.prices_status = 200
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/coins/markets"):
            if self.markets_status != 200:
                return httpx.Response(self.markets_status, json={"error": "unavailable"})
            return httpx.Response(200, json=self.markets)
        if request.url.path.endswith("/simple/price"):
            if self.prices_status != 200:
                return httpx.Response(self.prices_status, json={"error": "unavailable"})
            ids = request.url.params.get("ids", "").split(",")
            body = {i: {"usd": self.prices[i]} for i in ids if i in self.prices}
            return httpx.Response(200, json=body)
        return httpx.Response(404, json={"error": "not found"})

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


class GatedProvider(BaseMarketProvider):
    """Provider whose calls block until the test releases them."""

    def __init__(self, coins: Sequence[Coin], prices: Dict[str, float]):
        self.coins = list(coins)
        self.prices = dict(prices)
        self.gate = asyncio.Event()
        self.gate.set()
        self.fail = False

    @property
    def name(self) -> str:
        return "gated"

    async def fetch_top_coins(self, limit: int) -> List[Coin]:
        await self.gate.wait()
        if self.fail:
            raise CollaboratorUnavailable("down", "markets")
        return self.coins[:limit]

    async def fetch_prices(self, coin_ids: Sequence[str]) -> Dict[str, float]:
        await self.gate.wait()
        if self.fail:
            raise CollaboratorUnavailable("down", "simple_price")
        return {i: p for i, p in self.prices.items() if i in coin_ids}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage=StorageSettings(url="sqlite://"),
        poller=PollerSettings(interval_seconds=3600),
    )


@pytest.fixture
def durable_store():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield DurableStore(get_session_factory(engine))
    engine.dispose()


@pytest.fixture
def market() -> MarketStub:
    return MarketStub()


@pytest.fixture
def provider(market) -> CoinGeckoProvider:
    return CoinGeckoProvider(
        base_url="https://api.coingecko.test/api/v3",
        transport=httpx.MockTransport(market.handler),
    )


@pytest_asyncio.fixture
async def dashboard(settings, durable_store, provider):
    board = Dashboard(
        settings=settings,
        durable_store=durable_store,
        session_store=SessionStore(),
        provider=provider,
    )
    yield board
    await board.close()


@pytest.fixture
def registered(dashboard):
    dashboard.register(TEST_EMAIL, TEST_PASSWORD, TEST_PASSWORD)
    return TEST_EMAIL
