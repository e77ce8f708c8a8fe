"""Price and coin universe routes."""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...frontend.render import filter_coins
from ...shared.schemas import Coin, PricesResponse
from ..dashboard import Dashboard
from .auth import get_current_user, get_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prices", tags=["Prices"])


def _prices(dashboard: Dashboard) -> PricesResponse:
    prices = dict(dashboard.poller.prices)
    return PricesResponse(prices=prices, count=len(prices), timestamp=datetime.utcnow())


@router.get("/", response_model=PricesResponse)
async def list_prices(
    ids: Optional[str] = Query(None, description="Comma-separated coin ids to filter"),
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """Get the latest known USD prices."""
    response = _prices(dashboard)
    if ids:
        wanted = {s.strip().lower() for s in ids.split(",")}
        prices = {k: v for k, v in response.prices.items() if k in wanted}
        response = PricesResponse(prices=prices, count=len(prices), timestamp=response.timestamp)
    return response


@router.get("/coins", response_model=List[Coin])
async def list_coins(
    search: Optional[str] = Query(None, description="Match on name or symbol"),
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """List the loaded coin universe."""
    return filter_coins(dashboard.poller.coins, search or "")


@router.post("/refresh", response_model=PricesResponse)
async def refresh_prices(
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """Poll the market API now instead of waiting for the next tick."""
    await dashboard.refresh_prices()
    return _prices(dashboard)
