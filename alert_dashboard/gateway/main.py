"""Dashboard app - server-rendered UI and JSON API for crypto price alerts."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..ingestor.providers.base import BaseMarketProvider
from ..ingestor.providers.coingecko import CoinGeckoProvider
from ..shared import Settings, SessionStore, get_metrics, get_metrics_content_type, get_settings
from ..shared.metrics import SERVICE_INFO
from .dashboard import Dashboard
from .db import DurableStore, create_db_engine, get_session_factory, init_db
from .routes import alerts_router, auth_router, prices_router, views_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[BaseMarketProvider] = None,
) -> FastAPI:
    """Build the app. `provider` overrides the CoinGecko client."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        SERVICE_INFO.info({
            'name': 'alert-dashboard',
            'version': __version__,
            'environment': settings.environment
        })

        # Initialize durable storage
        engine = create_db_engine(settings.storage.url)
        init_db(engine)
        logger.info("Database initialized")

        market = provider or CoinGeckoProvider(
            base_url=settings.coingecko.base_url,
            api_key=settings.coingecko.api_key,
            timeout=settings.coingecko.timeout,
        )
        dashboard = Dashboard(
            settings=settings,
            durable_store=DurableStore(get_session_factory(engine)),
            session_store=SessionStore(),
            provider=market,
        )
        app.state.dashboard = dashboard
        await dashboard.restore()

        logger.info("Alert dashboard started")

        yield

        # Cleanup
        await dashboard.close()
        engine.dispose()
        logger.info("Alert dashboard stopped")

    app = FastAPI(
        title="Crypto Price Alerts",
        description="Price-threshold alerts over CoinGecko market data",
        version=__version__,
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(views_router)
    app.include_router(auth_router)
    app.include_router(alerts_router)
    app.include_router(prices_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics(),
            media_type=get_metrics_content_type()
        )

    return app


def main():
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
