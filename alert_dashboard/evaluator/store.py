"""Per-user active and triggered alert lists with write-through persistence."""
import logging
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from ..shared.exceptions import DuplicateAlert
from ..shared.metrics import ACTIVE_ALERTS
from ..shared.schemas import Alert, AlertState, TriggeredAlert
from ..shared.storage import KeyValueStore

logger = logging.getLogger(__name__)


def alerts_storage_key(user_key: str) -> str:
    return f"alerts_{user_key}"


def _valid_rows(model, rows, user_key: str) -> list:
    if not isinstance(rows, list):
        if rows is not None:
            logger.error(f"Stored {model.__name__} list for {user_key} is not a list, ignoring it")
        return []
    valid = []
    for row in rows:
        try:
            valid.append(model.model_validate(row))
        except SchemaError as e:
            logger.error(f"Skipping unreadable {model.__name__} for {user_key}: {e}")
    return valid


class AlertStore:
    """Holds the loaded user's alert lists.

    Every mutation persists the whole state for that user.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self.user_key: Optional[str] = None
        self.active: List[Alert] = []
        self.triggered: List[TriggeredAlert] = []

    def load(self, user_key: str) -> AlertState:
        """Read persisted lists for user_key and make them current."""
        state = self._read_state(user_key)

        self.user_key = user_key
        self.active = list(state.active)
        self.triggered = list(state.triggered)
        ACTIVE_ALERTS.set(len(self.active))

        logger.info(
            f"Loaded alerts for {user_key}: "
            f"{len(self.active)} active, {len(self.triggered)} triggered"
        )
        return state

    def _read_state(self, user_key: str) -> AlertState:
        """Persisted state with unreadable parts replaced by empty lists or dropped rows."""
        data = self._store.get(alerts_storage_key(user_key))
        if not data:
            return AlertState()
        if not isinstance(data, dict):
            logger.error(f"Stored alerts for {user_key} are unreadable, starting empty")
            return AlertState()
        return AlertState(
            active=_valid_rows(Alert, data.get("active"), user_key),
            triggered=_valid_rows(TriggeredAlert, data.get("triggered"), user_key),
        )

    def save(self, user_key: str, active: List[Alert], triggered: List[TriggeredAlert]) -> None:
        """Overwrite the persisted lists for user_key."""
        self._store.set(alerts_storage_key(user_key), {
            "active": [alert.to_storage() for alert in active],
            "triggered": [alert.to_storage() for alert in triggered],
        })

    def _persist(self) -> None:
        ACTIVE_ALERTS.set(len(self.active))
        if self.user_key is None:
            return
        self.save(self.user_key, self.active, self.triggered)

    def find_active(self, alert: Alert) -> Optional[Alert]:
        for existing in self.active:
            if existing.matches(alert):
                return existing
        return None

    def add_active(self, alert: Alert) -> Alert:
        if self.find_active(alert) is not None:
            raise DuplicateAlert("This alert already exists.")
        self.active.append(alert)
        self._persist()
        return alert

    def remove_active(self, alert: Alert) -> bool:
        """Remove the first structurally equal active alert. Missing alerts are a no-op."""
        for index, existing in enumerate(self.active):
            if existing.matches(alert):
                del self.active[index]
                self._persist()
                return True
        return False

    def record_triggered(self, remaining: List[Alert], newly_triggered: List[TriggeredAlert]) -> None:
        """Replace active with remaining and put newly_triggered at the front of history."""
        self.active = list(remaining)
        self.triggered = list(newly_triggered) + self.triggered
        self._persist()

    def clear(self) -> None:
        """Forget in-memory state. Storage is untouched."""
        self.user_key = None
        self.active = []
        self.triggered = []
        ACTIVE_ALERTS.set(0)
