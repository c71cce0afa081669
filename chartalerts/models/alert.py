"""Indicator alert data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from chartalerts.models.condition import Condition


class AlertFrequency(str, Enum):
    """How often an alert may fire."""

    ONCE_PER_BAR = "once_per_bar"  # fire once, then retire
    EVERY_TIME = "every_time"


class AlertStatus(str, Enum):
    ACTIVE = "active"
    TRIGGERED = "triggered"


def _new_alert_id() -> str:
    return f"indicator-alert-{uuid4().hex[:12]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IndicatorAlert(BaseModel):
    """Represents a user configured indicator alert."""

    id: str = Field(default_factory=_new_alert_id, description="Alert id")
    name: str = Field(default="", description="Display name")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    exchange: str = Field(default="NSE", min_length=1, description="Exchange code")
    indicator: str = Field(..., min_length=1, description="Indicator id")
    condition: Condition = Field(..., description="Configured condition instance")
    message: str = Field(default="", description="Message template")
    webhook_url: Optional[str] = Field(default=None, description="Delivery webhook")
    frequency: AlertFrequency = Field(default=AlertFrequency.ONCE_PER_BAR)
    interval: str = Field(default="1m", description="Chart timeframe")
    status: AlertStatus = Field(default=AlertStatus.ACTIVE)
    created_at: datetime = Field(
        default_factory=_utcnow, description="Alert creation timestamp"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _condition_matches_indicator(self) -> "IndicatorAlert":
        if self.condition.indicator != self.indicator:
            raise ValueError(
                f"condition belongs to '{self.condition.indicator}', not '{self.indicator}'"
            )
        return self

    @property
    def display_name(self) -> str:
        return self.name or f"{self.symbol} {self.indicator} Alert"


class AlertTrigger(BaseModel):
    """A single firing of an alert on a bar."""

    alert_id: str
    alert_name: str
    symbol: str
    exchange: str
    indicator: str
    condition_id: str
    condition_type: str
    message: str = Field(default="", description="Rendered message")
    price: Optional[float] = Field(default=None, description="Price at trigger")
    bar_time: Optional[datetime] = Field(default=None, description="Bar timestamp")
    triggered_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}
