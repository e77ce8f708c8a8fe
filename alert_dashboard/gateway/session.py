"""Session manager: the authenticated identity for the lifetime of the app."""
import logging
from typing import Callable, List, Optional

from ..shared.exceptions import AlreadyLoggedIn
from ..shared.schemas import GUEST_IDENTITY
from ..shared.storage import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY = "currentUser"


class SessionManager:
    """LoggedOut -> LoggedIn -> LoggedOut.

    Logout hooks run after the identity is cleared, in registration order.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._logout_hooks: List[Callable[[], None]] = []

    def add_logout_hook(self, hook: Callable[[], None]) -> None:
        self._logout_hooks.append(hook)

    def current_user(self) -> Optional[str]:
        return self._store.get(SESSION_KEY)

    @property
    def logged_in(self) -> bool:
        return self.current_user() is not None

    def login(self, email: str) -> str:
        if self.logged_in:
            raise AlreadyLoggedIn("Already logged in. Log out first.")
        self._store.set(SESSION_KEY, email)
        logger.info(f"Session started for {email}")
        return email

    def login_guest(self) -> str:
        return self.login(GUEST_IDENTITY)

    def logout(self) -> None:
        user = self.current_user()
        self._store.remove(SESSION_KEY)
        for hook in self._logout_hooks:
            hook()
        if user is not None:
            logger.info(f"Session ended for {user}")
