"""Top-level controller: owns the application state and wires the components."""
import logging
import math
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..evaluator.matcher import AlertMatcher
from ..evaluator.store import AlertStore
from ..ingestor.poller import PricePoller
from ..ingestor.providers.base import BaseMarketProvider
from ..notifier.notices import NoticeBoard
from ..shared.config import Settings
from ..shared.exceptions import AuthError, ValidationError
from ..shared.schemas import (
    Alert,
    AlertCondition,
    DashboardSnapshot,
    NoticeLevel,
    StoredUser,
)
from ..shared.storage import KeyValueStore
from .credentials import CredentialStore, normalize_email, validate_credentials
from .session import SessionManager

logger = logging.getLogger(__name__)


def parse_threshold(raw) -> float:
    """Positive, finite price or ValidationError."""
    try:
        threshold = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Please enter a valid price threshold.")
    if not math.isfinite(threshold) or threshold <= 0:
        raise ValidationError("Please enter a valid price threshold.")
    return threshold


def parse_condition(raw) -> AlertCondition:
    try:
        return AlertCondition(raw)
    except ValueError:
        raise ValidationError("Condition must be 'above' or 'below'.")


class Dashboard:
    """One running dashboard, the equivalent of a single browser tab."""

    def __init__(
        self,
        settings: Settings,
        durable_store: KeyValueStore,
        session_store: KeyValueStore,
        provider: BaseMarketProvider,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.settings = settings
        self.provider = provider
        self.notices = NoticeBoard(settings.notice.display_seconds)
        self.credentials = CredentialStore(durable_store)
        self.sessions = SessionManager(session_store)
        self.alerts = AlertStore(durable_store)
        self.matcher = AlertMatcher(self.alerts, self.notices)
        self.poller = PricePoller(
            provider,
            self.notices,
            on_prices=self.matcher.match,
            interval_seconds=settings.poller.interval_seconds,
            universe_size=settings.coingecko.universe_size,
            scheduler=scheduler,
        )

        # Auth view state
        self.is_login_view = True
        self.auth_message = ""
        self.auth_message_ok = False

        # Coin selector state
        self.search = ""
        self.selected_coin_id: Optional[str] = None

        self.sessions.add_logout_hook(self.alerts.clear)
        self.sessions.add_logout_hook(self.poller.stop)
        self.sessions.add_logout_hook(self._reset_auth_view)

    # ---- session ----

    def current_user(self) -> Optional[str]:
        return self.sessions.current_user()

    def require_user(self) -> str:
        user = self.current_user()
        if user is None:
            raise AuthError("Not logged in.")
        return user

    async def restore(self) -> None:
        """Enter the app if the session store already holds an identity."""
        user = self.current_user()
        if user is not None and not self.poller.running:
            await self._enter_app(user)

    async def _enter_app(self, user: str) -> None:
        """Load the user's alerts and start polling. Any failure ends the session again."""
        try:
            self.alerts.load(user)
            self.auth_message = ""
            await self.poller.start()
        except Exception as e:
            logger.error(f"Could not enter the app for {user}: {e}")
            self.sessions.logout()
            raise

    def register(self, email: str, password: str, confirm_password: Optional[str] = None) -> StoredUser:
        user = self.credentials.register(email, password, confirm_password)
        self.is_login_view = True
        self.auth_message = "Account created successfully! Please log in."
        self.auth_message_ok = True
        return user

    async def login(self, email: str, password: str) -> str:
        email = normalize_email(email)
        validate_credentials(email, password)
        if not self.credentials.verify(email, password):
            logger.info(f"Failed login for {email}")
            raise AuthError("Invalid email or password.")
        user = self.sessions.login(email)
        await self._enter_app(user)
        return user

    async def login_guest(self) -> str:
        user = self.sessions.login_guest()
        await self._enter_app(user)
        return user

    def logout(self) -> None:
        self.sessions.logout()

    def _reset_auth_view(self) -> None:
        self.is_login_view = True
        self.auth_message = ""
        self.auth_message_ok = False
        self.search = ""
        self.selected_coin_id = None

    def toggle_auth_view(self) -> None:
        self.is_login_view = not self.is_login_view
        self.auth_message = ""
        self.auth_message_ok = False

    def show_auth_error(self, message: str) -> None:
        self.auth_message = message
        self.auth_message_ok = False

    # ---- alerts ----

    def add_alert(self, coin_id: str, condition, threshold) -> Alert:
        self.require_user()
        if not coin_id:
            raise ValidationError("Please enter a valid price threshold.")
        alert = Alert(
            coin_id=coin_id,
            condition=parse_condition(condition),
            threshold=parse_threshold(threshold),
        )
        self.alerts.add_active(alert)

        coin = self.poller.find_coin(coin_id)
        label = coin.name if coin is not None else coin_id[:1].upper() + coin_id[1:]
        self.notices.push(f"Alert set for {label}!")
        logger.info(f"Alert created: {coin_id} {alert.condition.value} {alert.threshold}")
        return alert

    def remove_alert(self, coin_id: str, condition, threshold) -> bool:
        self.require_user()
        try:
            alert = Alert(
                coin_id=coin_id,
                condition=parse_condition(condition),
                threshold=parse_threshold(threshold),
            )
        except ValidationError:
            # Nothing invalid can be stored, so nothing to remove
            return False
        removed = self.alerts.remove_active(alert)
        if removed:
            self.notices.push("Alert removed.", NoticeLevel.WARNING)
            logger.info(f"Alert deleted: {coin_id} {alert.condition.value} {alert.threshold}")
        return removed

    # ---- prices ----

    async def refresh_prices(self) -> None:
        self.require_user()
        await self.poller.refresh()

    def select_coin(self, coin_id: Optional[str], search: str = "") -> None:
        self.search = (search or "").strip()
        self.selected_coin_id = coin_id or None

    # ---- view ----

    def snapshot(self, notices: Optional[List] = None) -> DashboardSnapshot:
        return DashboardSnapshot(
            user=self.current_user(),
            coins=list(self.poller.coins),
            prices=dict(self.poller.prices),
            active=list(self.alerts.active),
            triggered=list(self.alerts.triggered),
            selected_coin_id=self.selected_coin_id,
            search=self.search,
            is_login_view=self.is_login_view,
            auth_message=self.auth_message,
            auth_message_ok=self.auth_message_ok,
            notices=notices or [],
            poll_interval_seconds=self.settings.poller.interval_seconds,
        )

    async def close(self) -> None:
        self.poller.shutdown()
        await self.provider.aclose()
