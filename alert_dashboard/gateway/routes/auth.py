"""Authentication routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm

from ...shared.exceptions import AlreadyLoggedIn, AuthError, ValidationError
from ...shared.schemas import GUEST_IDENTITY, SessionResponse, UserRegister, UserResponse
from ..credentials import normalize_email
from ..dashboard import Dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_dashboard(request: Request) -> Dashboard:
    """Dependency to get the running dashboard."""
    return request.app.state.dashboard


async def get_current_user(dashboard: Dashboard = Depends(get_dashboard)) -> str:
    """Return the session identity or answer 401."""
    user = dashboard.current_user()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return user


def _session(user) -> SessionResponse:
    return SessionResponse(user=user, guest=user == GUEST_IDENTITY)


# Routes
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, dashboard: Dashboard = Depends(get_dashboard)):
    """Register a new user."""
    try:
        user = dashboard.register(user_data.email, user_data.password, user_data.confirm_password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    return UserResponse(email=normalize_email(user_data.email), signed_up_at=user.signed_up_at)


@router.post("/login", response_model=SessionResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    dashboard: Dashboard = Depends(get_dashboard)
):
    """Login and start polling."""
    try:
        user = await dashboard.login(form_data.username, form_data.password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except AlreadyLoggedIn as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e

    logger.info(f"User logged in: {user}")
    return _session(user)


@router.post("/guest", response_model=SessionResponse)
async def login_guest(dashboard: Dashboard = Depends(get_dashboard)):
    """Continue as guest."""
    try:
        user = await dashboard.login_guest()
    except AlreadyLoggedIn as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return _session(user)


@router.post("/logout", response_model=SessionResponse)
async def logout(dashboard: Dashboard = Depends(get_dashboard)):
    """End the session, forget loaded alerts and stop polling."""
    dashboard.logout()
    return _session(None)


@router.get("/me", response_model=SessionResponse)
async def get_me(current_user: str = Depends(get_current_user)):
    """Get the current session."""
    return _session(current_user)
