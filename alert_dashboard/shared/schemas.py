"""Shared Pydantic schemas for stored state, API payloads and view snapshots."""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

GUEST_IDENTITY = "guest"


class AlertCondition(str, Enum):
    """Direction of threshold crossing."""
    ABOVE = "above"
    BELOW = "below"


class NoticeLevel(str, Enum):
    """Severity of a transient notice."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# ============================================
# Domain Schemas
# ============================================

class Coin(BaseModel):
    """Coin metadata as returned by /coins/markets."""
    id: str
    name: str
    symbol: str
    image: Optional[str] = Field(None, description="Icon URL")


class Alert(BaseModel):
    """An active price-threshold alert."""
    coin_id: str = Field(..., alias="coinId", min_length=1)
    condition: AlertCondition
    threshold: float = Field(..., gt=0)

    class Config:
        populate_by_name = True
        frozen = True

    def key(self) -> Tuple[str, AlertCondition, float]:
        """Identity used for duplicate detection and removal."""
        return (self.coin_id, self.condition, self.threshold)

    def matches(self, other: "Alert") -> bool:
        return self.key() == other.key()

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class TriggeredAlert(Alert):
    """An alert whose condition was met, kept as notification history."""
    triggered_at: datetime = Field(..., alias="triggeredAt")
    triggered_price: float = Field(..., alias="triggeredPrice")

    @classmethod
    def from_alert(cls, alert: Alert, price: float, at: datetime) -> "TriggeredAlert":
        return cls(
            coin_id=alert.coin_id,
            condition=alert.condition,
            threshold=alert.threshold,
            triggered_at=at,
            triggered_price=price,
        )


class AlertState(BaseModel):
    """Persisted alert lists for one user."""
    active: List[Alert] = Field(default_factory=list)
    triggered: List[TriggeredAlert] = Field(default_factory=list)


class StoredUser(BaseModel):
    """Credential record kept under the `users` storage key."""
    hash: str
    signed_up_at: datetime = Field(..., alias="signedUpAt")

    class Config:
        populate_by_name = True


class Notice(BaseModel):
    """A transient, show-once message for the user."""
    message: str
    level: NoticeLevel = NoticeLevel.SUCCESS
    created_at: datetime = Field(default_factory=datetime.utcnow)


class DashboardSnapshot(BaseModel):
    """Immutable view of the dashboard state handed to the renderer."""
    user: Optional[str] = None
    coins: List[Coin] = Field(default_factory=list)
    prices: Dict[str, float] = Field(default_factory=dict)
    active: List[Alert] = Field(default_factory=list)
    triggered: List[TriggeredAlert] = Field(default_factory=list)
    selected_coin_id: Optional[str] = None
    search: str = ""
    is_login_view: bool = True
    auth_message: str = ""
    auth_message_ok: bool = False
    notices: List[Notice] = Field(default_factory=list)
    poll_interval_seconds: int = 30

    class Config:
        frozen = True

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    @property
    def is_guest(self) -> bool:
        return self.user == GUEST_IDENTITY

    def coin(self, coin_id: Optional[str]) -> Optional[Coin]:
        for coin in self.coins:
            if coin.id == coin_id:
                return coin
        return None


# ============================================
# API Request/Response Schemas
# ============================================

class UserRegister(BaseModel):
    """Request schema for sign-up."""
    email: str
    password: str
    confirm_password: Optional[str] = None


class UserResponse(BaseModel):
    """Response schema for a registered user."""
    email: str
    signed_up_at: datetime


class SessionResponse(BaseModel):
    """Response schema for the current session."""
    user: Optional[str]
    guest: bool = False


class AlertCreate(BaseModel):
    """Request schema for creating or removing an alert."""
    coin_id: str = Field(..., min_length=1)
    condition: AlertCondition
    threshold: float


class AlertsResponse(BaseModel):
    """Response schema for the user's alert lists."""
    active: List[Alert]
    triggered: List[TriggeredAlert]


class PricesResponse(BaseModel):
    """Response schema for the price table."""
    prices: Dict[str, float]
    count: int
    timestamp: datetime
