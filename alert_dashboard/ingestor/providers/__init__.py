"""Providers package."""
from .base import BaseMarketProvider
from .coingecko import CoinGeckoProvider

__all__ = ["BaseMarketProvider", "CoinGeckoProvider"]
