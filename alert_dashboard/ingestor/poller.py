"""Price poller: keeps the coin universe and price table fresh on a schedule."""
import asyncio
import logging
from typing import Callable, Dict, List, Mapping, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..notifier.notices import NoticeBoard
from ..shared.exceptions import CollaboratorUnavailable
from ..shared.metrics import POLL_CYCLES, STALE_RESULTS_DISCARDED
from ..shared.schemas import Coin, NoticeLevel
from .providers.base import BaseMarketProvider

logger = logging.getLogger(__name__)

JOB_ID = "price_fetch"


class PricePoller:
    """Owns the coin universe and the price table.

    ``start`` and ``stop`` bump a generation counter. A fetch remembers the
    generation it started under and drops its result if the counter moved
    while it was awaiting the network, so nothing resolves into a stopped
    session.

    Every poll holds ``_poll_lock``, so scheduled ticks, manual refreshes and
    the first fetch after ``start`` run one after another and never overlap.
    """

    def __init__(
        self,
        provider: BaseMarketProvider,
        notices: NoticeBoard,
        on_prices: Optional[Callable[[Mapping[str, float]], object]] = None,
        interval_seconds: int = 30,
        universe_size: int = 100,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.provider = provider
        self.notices = notices
        self.on_prices = on_prices
        self.interval_seconds = interval_seconds
        self.universe_size = universe_size
        self.scheduler = scheduler or AsyncIOScheduler()

        self.coins: List[Coin] = []
        self.prices: Dict[str, float] = {}
        self._generation = 0
        self._running = False
        self._poll_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._running

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    async def start(self) -> None:
        """Fetch once immediately, then every interval_seconds until stop()."""
        self._generation += 1
        self._running = True

        if not self.scheduler.running:
            self.scheduler.start()
        self.scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"Price poller started (every {self.interval_seconds} seconds)")

        async with self._poll_lock:
            await self._fetch_coin_universe()

    def stop(self) -> None:
        """Cancel the schedule and invalidate in-flight fetches."""
        self._generation += 1
        if not self._running:
            return
        self._running = False
        if self.scheduler.running and self.scheduler.get_job(JOB_ID) is not None:
            self.scheduler.remove_job(JOB_ID)
        logger.info("Price poller stopped")

    def shutdown(self) -> None:
        self.stop()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def tick(self) -> None:
        """Scheduled job body. Waits for any poll already in flight."""
        async with self._poll_lock:
            if not self._running:
                return
            if not self.coins:
                await self._fetch_coin_universe()
            else:
                await self._fetch_prices()

    async def refresh(self) -> None:
        """Poll now, outside the schedule."""
        await self.tick()

    async def fetch_coin_universe(self) -> bool:
        """Replace the coin list with the top coins, then fetch their prices."""
        async with self._poll_lock:
            return await self._fetch_coin_universe()

    async def fetch_prices(self) -> bool:
        """Merge the latest USD prices into the price table and hand them to on_prices."""
        async with self._poll_lock:
            return await self._fetch_prices()

    async def _fetch_coin_universe(self) -> bool:
        generation = self._generation
        try:
            coins = await self.provider.fetch_top_coins(self.universe_size)
        except CollaboratorUnavailable as e:
            logger.error(f"Error fetching crypto list: {e}")
            if self._is_current(generation):
                self.notices.push("Could not fetch crypto data.", NoticeLevel.ERROR)
            return False

        if not self._is_current(generation):
            STALE_RESULTS_DISCARDED.labels(endpoint="markets").inc()
            logger.info("Discarding coin list that arrived after the poller stopped")
            return False

        self.coins = coins
        await self._fetch_prices()
        return True

    async def _fetch_prices(self) -> bool:
        if not self.coins:
            return False

        generation = self._generation
        try:
            latest = await self.provider.fetch_prices([coin.id for coin in self.coins])
        except CollaboratorUnavailable as e:
            logger.error(f"Error fetching prices: {e}")
            return False

        if not self._is_current(generation):
            STALE_RESULTS_DISCARDED.labels(endpoint="simple_price").inc()
            logger.info("Discarding prices that arrived after the poller stopped")
            return False

        self.prices.update(latest)
        POLL_CYCLES.inc()
        if self.on_prices is not None:
            self.on_prices(dict(self.prices))
        return True

    def find_coin(self, coin_id: Optional[str]) -> Optional[Coin]:
        for coin in self.coins:
            if coin.id == coin_id:
                return coin
        return None
