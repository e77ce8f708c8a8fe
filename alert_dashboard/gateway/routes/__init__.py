"""Routes package."""
from .auth import router as auth_router, get_current_user, get_dashboard
from .alerts import router as alerts_router
from .prices import router as prices_router
from .views import router as views_router

__all__ = [
    "auth_router",
    "alerts_router",
    "prices_router",
    "views_router",
    "get_current_user",
    "get_dashboard",
]
