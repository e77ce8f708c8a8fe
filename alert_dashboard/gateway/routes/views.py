"""Server-rendered dashboard page and its form handlers."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import HTMLResponse, RedirectResponse

from ...frontend import render
from ...shared.exceptions import AuthError, DuplicateAlert, ValidationError
from ...shared.schemas import Notice, NoticeLevel
from ..dashboard import Dashboard
from .auth import get_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Views"])


def _back_home() -> RedirectResponse:
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", response_class=HTMLResponse)
async def index(dashboard: Dashboard = Depends(get_dashboard)):
    """The dashboard when logged in, otherwise the login/sign-up form."""
    snapshot = dashboard.snapshot(notices=dashboard.notices.pop_all())
    return HTMLResponse(render.render_page(snapshot))


@router.get("/fragments/{name}", response_class=HTMLResponse)
async def fragment(name: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Single dashboard fragment for partial refreshes."""
    renderers = {
        "coins": render.render_coin_options,
        "alerts": render.render_active_alerts,
        "notifications": render.render_notifications,
    }
    if name not in renderers:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown fragment")
    if dashboard.current_user() is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return HTMLResponse(renderers[name](dashboard.snapshot()))


@router.get("/notices", response_model=List[Notice])
async def pop_notices(dashboard: Dashboard = Depends(get_dashboard)):
    """Drain pending transient notices."""
    return dashboard.notices.pop_all()


@router.post("/ui/auth")
async def submit_auth(
    mode: str = Form("login"),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: Optional[str] = Form(None),
    dashboard: Dashboard = Depends(get_dashboard)
):
    try:
        if mode == "signup":
            dashboard.register(email, password, confirm_password or "")
        else:
            await dashboard.login(email, password)
    except (ValidationError, AuthError) as e:
        dashboard.show_auth_error(e.message)
    return _back_home()


@router.post("/ui/auth/toggle")
async def toggle_auth(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.toggle_auth_view()
    return _back_home()


@router.post("/ui/guest")
async def submit_guest(dashboard: Dashboard = Depends(get_dashboard)):
    try:
        await dashboard.login_guest()
    except AuthError as e:
        dashboard.show_auth_error(e.message)
    return _back_home()


@router.post("/ui/logout")
async def submit_logout(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.logout()
    return _back_home()


@router.post("/ui/select")
async def submit_select(
    coin_id: str = Form(""),
    search: str = Form(""),
    dashboard: Dashboard = Depends(get_dashboard)
):
    dashboard.select_coin(coin_id, search)
    return _back_home()


@router.post("/ui/alerts")
async def submit_alert(
    coin_id: str = Form(""),
    condition: str = Form("above"),
    threshold: str = Form(""),
    dashboard: Dashboard = Depends(get_dashboard)
):
    try:
        dashboard.add_alert(coin_id, condition, threshold)
    except DuplicateAlert as e:
        dashboard.notices.push(e.message, NoticeLevel.WARNING)
    except ValidationError as e:
        dashboard.notices.push(e.message, NoticeLevel.ERROR)
    except AuthError:
        logger.info("Ignoring alert form from a logged-out session")
    return _back_home()


@router.post("/ui/alerts/remove")
async def submit_remove(
    coin_id: str = Form(""),
    condition: str = Form(""),
    threshold: str = Form(""),
    dashboard: Dashboard = Depends(get_dashboard)
):
    try:
        dashboard.remove_alert(coin_id, condition, threshold)
    except AuthError:
        logger.info("Ignoring remove form from a logged-out session")
    return _back_home()
