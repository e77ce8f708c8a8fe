"""Base provider interface for market data sources."""
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from ...shared.schemas import Coin


class BaseMarketProvider(ABC):
    """Abstract base class for market data providers.

    Implementations raise CollaboratorUnavailable on any transport,
    status or payload failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def fetch_top_coins(self, limit: int) -> List[Coin]:
        """Fetch the top coins by market capitalization."""
        pass

    @abstractmethod
    async def fetch_prices(self, coin_ids: Sequence[str]) -> Dict[str, float]:
        """Fetch USD spot prices for coin_ids in one request."""
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        pass
