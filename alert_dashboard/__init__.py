"""Crypto price-alert dashboard."""
__version__ = "1.0.0"
