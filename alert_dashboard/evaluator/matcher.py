"""Alert matching: migrates crossed alerts from active to triggered."""
import logging
from datetime import datetime
from typing import List, Mapping, Optional

from ..notifier.notices import NoticeBoard
from ..shared.metrics import ALERTS_TRIGGERED
from ..shared.schemas import Alert, AlertCondition, NoticeLevel, TriggeredAlert
from .store import AlertStore

logger = logging.getLogger(__name__)


def check_condition(condition: AlertCondition, threshold: float, current_price: float) -> bool:
    """Check if a price condition is met. Equality never fires."""
    if condition == AlertCondition.ABOVE:
        return current_price > threshold

    elif condition == AlertCondition.BELOW:
        return current_price < threshold

    return False


class AlertMatcher:
    """Matches the latest price table against the loaded user's active alerts."""

    def __init__(self, store: AlertStore, notices: NoticeBoard):
        self.store = store
        self.notices = notices

    def match(self, prices: Mapping[str, float], now: Optional[datetime] = None) -> List[TriggeredAlert]:
        """Evaluate every active alert once and return the ones that fired."""
        if self.store.user_key is None:
            return []

        evaluated_at = now or datetime.utcnow()
        remaining: List[Alert] = []
        newly_triggered: List[TriggeredAlert] = []

        for alert in self.store.active:
            current_price = prices.get(alert.coin_id)
            if current_price is None:
                # No price yet, keep for the next cycle
                remaining.append(alert)
                continue

            if check_condition(alert.condition, alert.threshold, current_price):
                newly_triggered.append(TriggeredAlert.from_alert(alert, current_price, evaluated_at))
                ALERTS_TRIGGERED.labels(condition=alert.condition.value).inc()
                logger.info(
                    f"Alert triggered for {alert.coin_id} "
                    f"({alert.condition.value} {alert.threshold}) @ {current_price}"
                )
            else:
                remaining.append(alert)

        if newly_triggered:
            self.store.record_triggered(remaining, newly_triggered)
            self.notices.push(
                f"You have {len(newly_triggered)} new triggered alert(s)!",
                NoticeLevel.INFO,
            )

        return newly_triggered
