"""Shared utilities for the alert dashboard."""
from .config import get_settings, Settings
from .exceptions import (
    DashboardError,
    ValidationError,
    AuthError,
    CollaboratorUnavailable,
    DuplicateAlert,
    AlreadyLoggedIn,
)
from .schemas import (
    AlertCondition,
    Alert,
    TriggeredAlert,
    AlertState,
    Coin,
    Notice,
    NoticeLevel,
    DashboardSnapshot,
    GUEST_IDENTITY,
)
from .storage import KeyValueStore, SessionStore
from .metrics import get_metrics, get_metrics_content_type

__all__ = [
    "get_settings",
    "Settings",
    "DashboardError",
    "ValidationError",
    "AuthError",
    "CollaboratorUnavailable",
    "DuplicateAlert",
    "AlreadyLoggedIn",
    "AlertCondition",
    "Alert",
    "TriggeredAlert",
    "AlertState",
    "Coin",
    "Notice",
    "NoticeLevel",
    "DashboardSnapshot",
    "GUEST_IDENTITY",
    "KeyValueStore",
    "SessionStore",
    "get_metrics",
    "get_metrics_content_type",
]
