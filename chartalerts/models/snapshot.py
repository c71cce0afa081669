"""Per-bar snapshot models supplied by the host."""

from datetime import datetime
from typing import Mapping, Optional, Union

from pydantic import BaseModel, Field

# indicator id -> series name -> value, for a single bar
IndicatorSnapshot = Mapping[str, Mapping[str, float]]


class PriceSnapshot(BaseModel):
    """OHLCV values for one bar."""

    open: Optional[float] = Field(default=None, ge=0, description="Opening price")
    high: Optional[float] = Field(default=None, ge=0, description="High price")
    low: Optional[float] = Field(default=None, ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: Optional[float] = Field(default=None, ge=0, description="Traded volume")
    timestamp: Optional[datetime] = Field(default=None, description="Bar open time")

    model_config = {"frozen": True}


PriceInput = Union[float, int, PriceSnapshot, None]
