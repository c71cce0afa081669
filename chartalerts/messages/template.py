"""Alert message template processing.

Messages are plain strings with ``{{token}}`` placeholders that are filled
from a data bag when an alert fires::

    {
        "symbol": "TCS", "exchange": "NSE",
        "open": ..., "high": ..., "low": ..., "close": ..., "volume": ...,
        "time": datetime | epoch milliseconds,
        "indicators": {"rsi": {"value": 72.3}, "macd": {...}},
        "alert": {"name": ..., "condition": ...},
    }

Unrecognised tokens are left in place untouched.
"""

import math
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import cached_property
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from chartalerts.models import Condition, ConditionType

TOKEN_PATTERN = re.compile(r"\{\{([A-Za-z_]\w*(?:\.\w+)?)\}\}")

PRICE_FIELDS = ("open", "high", "low", "close")

# Short token names for indicators with long ids
INDICATOR_ALIASES = {
    "bb": "bollingerBands",
    "stoch": "stochastic",
}

# Series rendered by a bare {{indicatorId}} token; everything else uses "value"
PRIMARY_SERIES = {
    "macd": "macd",
    "supertrend": "supertrend",
    "bollingerBands": "middle",
    "stochastic": "k",
}

AVAILABLE_PLACEHOLDERS = {
    "general": [
        {"token": "{{symbol}}", "description": "Trading symbol"},
        {"token": "{{exchange}}", "description": "Exchange name"},
        {"token": "{{time}}", "description": "ISO timestamp"},
        {"token": "{{date}}", "description": "Date string"},
        {"token": "{{timestamp}}", "description": "Epoch milliseconds"},
    ],
    "price": [
        {"token": "{{close}}", "description": "Close price"},
        {"token": "{{open}}", "description": "Open price"},
        {"token": "{{high}}", "description": "High price"},
        {"token": "{{low}}", "description": "Low price"},
        {"token": "{{volume}}", "description": "Volume"},
    ],
    "alert": [
        {"token": "{{alert.name}}", "description": "Alert name"},
        {"token": "{{alert.condition}}", "description": "Alert condition label"},
    ],
    "indicators": {
        "rsi": [
            {"token": "{{rsi}}", "description": "RSI value"},
        ],
        "macd": [
            {"token": "{{macd}}", "description": "MACD line value"},
            {"token": "{{macd.signal}}", "description": "Signal line value"},
            {"token": "{{macd.histogram}}", "description": "Histogram value"},
        ],
        "bollingerBands": [
            {"token": "{{bb.upper}}", "description": "Upper band value"},
            {"token": "{{bb.middle}}", "description": "Middle band value"},
            {"token": "{{bb.lower}}", "description": "Lower band value"},
        ],
        "stochastic": [
            {"token": "{{stoch.k}}", "description": "%K value"},
            {"token": "{{stoch.d}}", "description": "%D value"},
        ],
        "supertrend": [
            {"token": "{{supertrend}}", "description": "Supertrend value"},
            {"token": "{{supertrend.direction}}", "description": "Trend direction (Bullish/Bearish)"},
        ],
        "vwap": [
            {"token": "{{vwap}}", "description": "VWAP value"},
        ],
        "sma": [
            {"token": "{{sma}}", "description": "SMA value"},
        ],
        "ema": [
            {"token": "{{ema}}", "description": "EMA value"},
        ],
        "atr": [
            {"token": "{{atr}}", "description": "ATR value"},
        ],
    },
}


def format_value(value: Any, decimals: int = 2) -> str:
    """Format a number with fixed decimals, rounding half up.

    Rounding works on the shortest decimal form of the float, so 72.345
    becomes "72.35". Missing or non-numeric values render as "N/A".
    """
    if value is None or isinstance(value, bool):
        return "N/A"
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return "N/A"
    if not math.isfinite(number):
        return "N/A"

    quantum = Decimal(1).scaleb(-decimals)
    try:
        rounded = Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return f"{number:.{decimals}f}"
    return f"{rounded:f}"


def _to_datetime(value: Any) -> datetime:
    """UTC moment of a bar. Epoch 0 and unusable values mean "now"."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


class _TokenResolver:
    """Resolves one token against a data bag; None means "leave as is"."""

    def __init__(self, data: Mapping[str, Any]):
        self.data = data
        indicators = data.get("indicators")
        self.indicators = indicators if isinstance(indicators, Mapping) else {}
        alert = data.get("alert")
        self.alert = alert if isinstance(alert, Mapping) else None

    @cached_property
    def moment(self) -> datetime:
        return _to_datetime(self.data.get("time"))

    def __call__(self, match: re.Match) -> str:
        resolved = self.resolve(match.group(1))
        return match.group(0) if resolved is None else resolved

    def resolve(self, token: str) -> Optional[str]:
        if token in ("symbol", "exchange"):
            return str(self.data.get(token) or "")
        if token in PRICE_FIELDS:
            return format_value(self.data.get(token))
        if token == "volume":
            return format_value(self.data.get("volume"), 0)
        if token == "time":
            return _iso(self.moment)
        if token == "date":
            return self.moment.strftime("%Y-%m-%d")
        if token == "timestamp":
            return format_value(self.moment.timestamp() * 1000, 0)

        head, _, series = token.partition(".")
        if head == "alert":
            if self.alert is None or series not in ("name", "condition"):
                return None
            return str(self.alert.get(series) or "")

        return self._resolve_indicator(head, series)

    def _resolve_indicator(self, head: str, series: str) -> Optional[str]:
        indicator_id = INDICATOR_ALIASES.get(head, head)
        values = self.indicators.get(indicator_id)
        if not isinstance(values, Mapping):
            return None

        if not series:
            return format_value(values.get(PRIMARY_SERIES.get(indicator_id, "value")))
        if indicator_id == "supertrend" and series == "direction":
            direction = values.get("direction")
            if direction is None:
                return "N/A"
            return "Bullish" if direction == 1 else "Bearish"
        return format_value(values.get(series))


def process_alert_message(template: Any, data: Union[Mapping[str, Any], BaseModel, None]) -> str:
    """Fill the ``{{token}}`` placeholders of an alert message.

    Args:
        template: Message template. Anything but a non-empty string yields "".
        data: Data bag (see module docstring) or a pydantic model dumping to one.

    Returns:
        The processed message.
    """
    if not template or not isinstance(template, str):
        return ""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if not isinstance(data, Mapping):
        data = {}
    return TOKEN_PATTERN.sub(_TokenResolver(data), template)


def _plain(number: Any) -> str:
    """Render a template constant the way a user typed it: 70, not 70.0."""
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def _field(condition: Union[Condition, Mapping[str, Any]], name: str) -> Any:
    if isinstance(condition, Mapping):
        camel = {"requires_price": "requiresPrice", "default_value": "defaultValue"}
        return condition.get(name, condition.get(camel.get(name, name)))
    return getattr(condition, name, None)


def get_default_message_template(condition: Union[Condition, Mapping[str, Any]],
                                 symbol: Optional[str] = None) -> str:
    """Derive a default message template from a condition.

    The result keeps the ``{{symbol}}`` token so the same template serves
    every symbol; ``symbol`` is accepted for call-site symmetry with
    ``process_alert_message``.
    """
    indicator = _field(condition, "indicator") or "indicator"
    ctype = _field(condition, "type")
    series = _field(condition, "series")
    value = _field(condition, "value")
    if value is None:
        value = _field(condition, "default_value")
    current = f"{{{{{indicator}.{series}}}}}" if series else f"{{{{{indicator}}}}}"

    zone = _field(condition, "zone")
    zone_text = (
        f"[{_plain(zone[0])}-{_plain(zone[1])}]"
        if isinstance(zone, (list, tuple)) and len(zone) == 2 else "[?]"
    )

    if ctype in (ConditionType.CROSSES_ABOVE, ConditionType.CROSSES_BELOW):
        direction = "above" if ctype == ConditionType.CROSSES_ABOVE else "below"
        if series == "price" or _field(condition, "requires_price"):
            return f"{{{{symbol}}}} crossed {direction} {indicator} at {{{{close}}}}"
        return (f"{{{{symbol}}}} {indicator} crossed {direction} {_plain(value)} "
                f"(current: {current})")

    if ctype in (ConditionType.GREATER_THAN, ConditionType.LESS_THAN):
        direction = "above" if ctype == ConditionType.GREATER_THAN else "below"
        return f"{{{{symbol}}}} {indicator} is {direction} {_plain(value)} (current: {current})"

    if ctype in (ConditionType.LINE_CROSSES_ABOVE, ConditionType.LINE_CROSSES_BELOW):
        direction = "above" if ctype == ConditionType.LINE_CROSSES_ABOVE else "below"
        series1 = _field(condition, "series1")
        series2 = _field(condition, "series2")
        return f"{{{{symbol}}}} {indicator} {series1} crossed {direction} {series2}"

    if ctype == ConditionType.ENTERS_ZONE:
        return f"{{{{symbol}}}} {indicator} entered zone {zone_text}"
    if ctype == ConditionType.EXITS_ZONE:
        return f"{{{{symbol}}}} {indicator} exited zone {zone_text}"
    if ctype == ConditionType.WITHIN_ZONE:
        return f"{{{{symbol}}}} {indicator} is within zone {zone_text} (current: {current})"
    if ctype == ConditionType.OUTSIDE_ZONE:
        return f"{{{{symbol}}}} {indicator} is outside zone {zone_text} (current: {current})"

    if ctype == ConditionType.EQUALS:
        return f"{{{{symbol}}}} {indicator} changed to {_plain(value)}"

    if ctype in (ConditionType.INCREASES_BY, ConditionType.DECREASES_BY,
                 ConditionType.CHANGES_BY):
        verb = {
            ConditionType.INCREASES_BY: "increased",
            ConditionType.DECREASES_BY: "decreased",
            ConditionType.CHANGES_BY: "changed",
        }[ConditionType(ctype)]
        return f"{{{{symbol}}}} {indicator} {verb} by at least {_plain(value)} (current: {current})"

    return f"{{{{symbol}}}} alert triggered for {indicator}"
