"""Alert routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...shared.exceptions import ValidationError
from ...shared.schemas import Alert, AlertCreate, AlertsResponse
from ..dashboard import Dashboard
from .auth import get_current_user, get_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["Alerts"])


def _lists(dashboard: Dashboard) -> AlertsResponse:
    return AlertsResponse(active=dashboard.alerts.active, triggered=dashboard.alerts.triggered)


@router.get("/", response_model=AlertsResponse, response_model_by_alias=True)
async def list_alerts(
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """List the user's active and triggered alerts."""
    return _lists(dashboard)


@router.post("/", response_model=Alert, response_model_by_alias=True, status_code=status.HTTP_201_CREATED)
async def create_alert(
    alert_data: AlertCreate,
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """Create a new price alert."""
    try:
        return dashboard.add_alert(alert_data.coin_id, alert_data.condition, alert_data.threshold)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e


@router.post("/remove", response_model=AlertsResponse, response_model_by_alias=True)
async def remove_alert(
    alert_data: AlertCreate,
    current_user: str = Depends(get_current_user),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """Remove an active alert. Unknown alerts are ignored."""
    dashboard.remove_alert(alert_data.coin_id, alert_data.condition, alert_data.threshold)
    return _lists(dashboard)
