"""Shared configuration management for the dashboard."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class CoinGeckoSettings(BaseSettings):
    """CoinGecko market API configuration."""
    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: Optional[str] = None
    timeout: float = 30.0
    universe_size: int = 100  # Top N coins by market cap

    class Config:
        env_prefix = "COINGECKO_"


class PollerSettings(BaseSettings):
    """Price poller configuration."""
    interval_seconds: int = 30

    class Config:
        env_prefix = "POLLER_"


class StorageSettings(BaseSettings):
    """Durable storage configuration."""
    url: str = "sqlite:///./alert_dashboard.db"

    class Config:
        env_prefix = "STORAGE_"


class NoticeSettings(BaseSettings):
    """Transient notice configuration."""
    display_seconds: float = 30.0  # How long an unseen notice stays pending

    class Config:
        env_prefix = "NOTICE_"


class Settings(BaseSettings):
    """Main application settings."""
    log_level: str = "INFO"
    environment: str = "development"

    # Nested settings
    coingecko: CoinGeckoSettings = CoinGeckoSettings()
    poller: PollerSettings = PollerSettings()
    storage: StorageSettings = StorageSettings()
    notice: NoticeSettings = NoticeSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
