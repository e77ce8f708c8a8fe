"""Transient, show-once notices for the user (the dashboard's toasts)."""
import logging
from datetime import datetime, timedelta
from typing import List

from ..shared.schemas import Notice, NoticeLevel

logger = logging.getLogger(__name__)


class NoticeBoard:
    """Queue of pending notices. Notices older than the display window are dropped."""

    def __init__(self, display_seconds: float = 30.0):
        self.display_window = timedelta(seconds=display_seconds)
        self._pending: List[Notice] = []

    def push(self, message: str, level: NoticeLevel = NoticeLevel.SUCCESS) -> Notice:
        notice = Notice(message=message, level=level)
        self._pending.append(notice)
        logger.debug(f"Notice ({level.value}): {message}")
        return notice

    def pop_all(self) -> List[Notice]:
        """Return and forget every notice still inside the display window."""
        cutoff = datetime.utcnow() - self.display_window
        notices = [n for n in self._pending if n.created_at >= cutoff]
        self._pending = []
        return notices

    def peek(self) -> List[Notice]:
        return list(self._pending)

    def clear(self) -> None:
        self._pending = []
