"""Condition registry - catalog of alertable indicators.

Maps each indicator id to its display metadata, the series it publishes
per bar, and the condition templates a user can pick from. The catalog is
built once at import time and never mutated afterwards.
"""

from typing import Optional

from pydantic import BaseModel, Field

from chartalerts.models import (
    ChangeCondition,
    Condition,
    ConditionType,
    LineCrossCondition,
    ThresholdCondition,
    ZoneCondition,
)


class IndicatorAlertConfig(BaseModel):
    """Alert support declared by one indicator."""

    id: str = Field(..., min_length=1, description="Indicator id")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Display description")
    series: tuple[str, ...] = Field(..., description="Series published per bar")
    conditions: tuple[Condition, ...] = Field(default=(), description="Condition templates")

    model_config = {"frozen": True}

    def get_condition(self, condition_id: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.id == condition_id:
                return condition
        return None


# ============================================================================
# Template helpers
# ============================================================================

def _threshold(indicator: str, id: str, type: ConditionType, label: str, desc: str,
               series: str = "value", value: Optional[float] = None,
               default: Optional[float] = None, value_range=None, step=None) -> ThresholdCondition:
    return ThresholdCondition(
        id=id, indicator=indicator, type=type.value, label=label, description=desc,
        series=series, value=value, default_value=default,
        value_range=value_range, value_step=step,
    )


def _price_cross(indicator: str, id: str, type: ConditionType, label: str, desc: str,
                 comparison: str) -> ThresholdCondition:
    """Price crossing a line published by the indicator itself."""
    return ThresholdCondition(
        id=id, indicator=indicator, type=type.value, label=label, description=desc,
        series="price", comparison=comparison, requires_price=True,
    )


def _zone(indicator: str, id: str, type: ConditionType, label: str, desc: str,
          zone: tuple[float, float], series: str = "value") -> ZoneCondition:
    return ZoneCondition(
        id=id, indicator=indicator, type=type.value, label=label, description=desc,
        series=series, zone=zone,
    )


def _line_cross(indicator: str, id: str, type: ConditionType, label: str, desc: str,
                series1: str, series2: str) -> LineCrossCondition:
    return LineCrossCondition(
        id=id, indicator=indicator, type=type.value, label=label, description=desc,
        series1=series1, series2=series2,
    )


def _change(indicator: str, id: str, type: ConditionType, label: str, desc: str,
            default: float, series: str = "value", value_range=None, step=None) -> ChangeCondition:
    return ChangeCondition(
        id=id, indicator=indicator, type=type.value, label=label, description=desc,
        series=series, default_value=default, value_range=value_range, value_step=step,
    )


_configs: list[IndicatorAlertConfig] = []


def _indicator(id: str, name: str, description: str, series: tuple[str, ...],
               conditions: list[Condition]) -> None:
    _configs.append(IndicatorAlertConfig(
        id=id, name=name, description=description, series=series,
        conditions=tuple(conditions),
    ))


T = ConditionType


# ──────────────────────────────────────────────────────────────────────
# Oscillators
# ──────────────────────────────────────────────────────────────────────

_indicator("rsi", "RSI", "Relative Strength Index", ("value",), [
    _threshold("rsi", "rsi_crosses_above", T.CROSSES_ABOVE, "RSI Crosses Above",
               "Alert when RSI crosses above a value",
               default=70, value_range=(0, 100), step=1),
    _threshold("rsi", "rsi_crosses_below", T.CROSSES_BELOW, "RSI Crosses Below",
               "Alert when RSI crosses below a value",
               default=30, value_range=(0, 100), step=1),
    _zone("rsi", "rsi_enters_overbought", T.ENTERS_ZONE, "RSI Enters Overbought",
          "Alert when RSI enters overbought zone (70-100)", (70, 100)),
    _zone("rsi", "rsi_enters_oversold", T.ENTERS_ZONE, "RSI Enters Oversold",
          "Alert when RSI enters oversold zone (0-30)", (0, 30)),
    _zone("rsi", "rsi_exits_overbought", T.EXITS_ZONE, "RSI Exits Overbought",
          "Alert when RSI exits overbought zone", (70, 100)),
    _zone("rsi", "rsi_exits_oversold", T.EXITS_ZONE, "RSI Exits Oversold",
          "Alert when RSI exits oversold zone", (0, 30)),
    _change("rsi", "rsi_changes_by", T.CHANGES_BY, "RSI Changes By",
            "Alert when RSI moves by at least a value in one bar",
            default=10, value_range=(0, 100), step=1),
])

_indicator("macd", "MACD", "Moving Average Convergence Divergence",
           ("macd", "signal", "histogram"), [
    _line_cross("macd", "macd_crosses_signal_up", T.LINE_CROSSES_ABOVE,
                "MACD Crosses Above Signal",
                "Alert when MACD line crosses above signal line (bullish)", "macd", "signal"),
    _line_cross("macd", "macd_crosses_signal_down", T.LINE_CROSSES_BELOW,
                "MACD Crosses Below Signal",
                "Alert when MACD line crosses below signal line (bearish)", "macd", "signal"),
    _threshold("macd", "macd_crosses_zero_up", T.CROSSES_ABOVE, "MACD Crosses Above Zero",
               "Alert when MACD crosses above zero line", series="macd", value=0),
    _threshold("macd", "macd_crosses_zero_down", T.CROSSES_BELOW, "MACD Crosses Below Zero",
               "Alert when MACD crosses below zero line", series="macd", value=0),
    _threshold("macd", "histogram_crosses_zero_up", T.CROSSES_ABOVE,
               "Histogram Crosses Above Zero",
               "Alert when MACD histogram crosses above zero", series="histogram", value=0),
    _threshold("macd", "histogram_crosses_zero_down", T.CROSSES_BELOW,
               "Histogram Crosses Below Zero",
               "Alert when MACD histogram crosses below zero", series="histogram", value=0),
])

_indicator("stochastic", "Stochastic", "Stochastic Oscillator", ("k", "d"), [
    _line_cross("stochastic", "k_crosses_d_up", T.LINE_CROSSES_ABOVE, "%K Crosses Above %D",
                "Alert when %K line crosses above %D line (bullish)", "k", "d"),
    _line_cross("stochastic", "k_crosses_d_down", T.LINE_CROSSES_BELOW, "%K Crosses Below %D",
                "Alert when %K line crosses below %D line (bearish)", "k", "d"),
    _zone("stochastic", "stoch_enters_overbought", T.ENTERS_ZONE,
          "Stochastic Enters Overbought",
          "Alert when stochastic enters overbought zone (80-100)", (80, 100), series="k"),
    _zone("stochastic", "stoch_enters_oversold", T.ENTERS_ZONE,
          "Stochastic Enters Oversold",
          "Alert when stochastic enters oversold zone (0-20)", (0, 20), series="k"),
    _zone("stochastic", "stoch_exits_overbought", T.EXITS_ZONE,
          "Stochastic Exits Overbought",
          "Alert when stochastic exits overbought zone", (80, 100), series="k"),
    _zone("stochastic", "stoch_exits_oversold", T.EXITS_ZONE,
          "Stochastic Exits Oversold",
          "Alert when stochastic exits oversold zone", (0, 20), series="k"),
])

_indicator("atr", "ATR", "Average True Range", ("value",), [
    _threshold("atr", "atr_crosses_above", T.CROSSES_ABOVE, "ATR Crosses Above",
               "Alert when ATR crosses above a value",
               default=10, value_range=(0, 1000), step=0.1),
    _threshold("atr", "atr_crosses_below", T.CROSSES_BELOW, "ATR Crosses Below",
               "Alert when ATR crosses below a value",
               default=5, value_range=(0, 1000), step=0.1),
    _change("atr", "atr_increases_by", T.INCREASES_BY, "ATR Increases By",
            "Alert when ATR expands by at least a value in one bar",
            default=1, value_range=(0, 1000), step=0.1),
])


# ──────────────────────────────────────────────────────────────────────
# Overlays (price crossing the indicator line)
# ──────────────────────────────────────────────────────────────────────

_indicator("bollingerBands", "Bollinger Bands", "Volatility bands around moving average",
           ("upper", "middle", "lower"), [
    _price_cross("bollingerBands", "price_crosses_upper_up", T.CROSSES_ABOVE,
                 "Price Crosses Above Upper Band",
                 "Alert when price crosses above upper Bollinger Band", "upper"),
    _price_cross("bollingerBands", "price_crosses_upper_down", T.CROSSES_BELOW,
                 "Price Crosses Below Upper Band",
                 "Alert when price crosses back below upper band", "upper"),
    _price_cross("bollingerBands", "price_crosses_lower_down", T.CROSSES_BELOW,
                 "Price Crosses Below Lower Band",
                 "Alert when price crosses below lower Bollinger Band", "lower"),
    _price_cross("bollingerBands", "price_crosses_lower_up", T.CROSSES_ABOVE,
                 "Price Crosses Above Lower Band",
                 "Alert when price crosses back above lower band", "lower"),
    _price_cross("bollingerBands", "price_crosses_middle", T.CROSSES_ABOVE,
                 "Price Crosses Middle Band",
                 "Alert when price crosses the middle (SMA) line", "middle"),
])

_indicator("supertrend", "Supertrend", "Trend following indicator",
           ("supertrend", "direction"), [
    _threshold("supertrend", "supertrend_bullish", T.EQUALS, "Trend Changes to Bullish",
               "Alert when Supertrend changes to bullish (green)",
               series="direction", value=1),
    _threshold("supertrend", "supertrend_bearish", T.EQUALS, "Trend Changes to Bearish",
               "Alert when Supertrend changes to bearish (red)",
               series="direction", value=-1),
    _price_cross("supertrend", "price_crosses_supertrend_up", T.CROSSES_ABOVE,
                 "Price Crosses Above Supertrend",
                 "Alert when price crosses above Supertrend line", "supertrend"),
    _price_cross("supertrend", "price_crosses_supertrend_down", T.CROSSES_BELOW,
                 "Price Crosses Below Supertrend",
                 "Alert when price crosses below Supertrend line", "supertrend"),
])

for _id, _name, _desc in (
    ("vwap", "VWAP", "Volume Weighted Average Price"),
    ("sma", "SMA", "Simple Moving Average"),
    ("ema", "EMA", "Exponential Moving Average"),
):
    _indicator(_id, _name, _desc, ("value",), [
        _price_cross(_id, f"price_crosses_{_id}_up", T.CROSSES_ABOVE,
                     f"Price Crosses Above {_name}",
                     f"Alert when price crosses above {_name}", "value"),
        _price_cross(_id, f"price_crosses_{_id}_down", T.CROSSES_BELOW,
                     f"Price Crosses Below {_name}",
                     f"Alert when price crosses below {_name}", "value"),
    ])


INDICATOR_ALERT_CONFIGS: dict[str, IndicatorAlertConfig] = {c.id: c for c in _configs}

del _configs, _id, _name, _desc, T  # cleanup helpers


# ============================================================================
# Lookup API
# ============================================================================

def get_indicator_config(indicator_id: str) -> Optional[IndicatorAlertConfig]:
    """Get alert configuration for an indicator, or None if it has no alert support."""
    return INDICATOR_ALERT_CONFIGS.get(indicator_id)


def list_alertable_indicators() -> list[IndicatorAlertConfig]:
    """Get all indicators that support alerts, in catalog order."""
    return list(INDICATOR_ALERT_CONFIGS.values())


def is_alertable(indicator_id: str) -> bool:
    """Check if an indicator supports alerts."""
    return indicator_id in INDICATOR_ALERT_CONFIGS


def get_condition_template(indicator_id: str, condition_id: str) -> Optional[Condition]:
    """Get a condition template by indicator and condition id."""
    config = INDICATOR_ALERT_CONFIGS.get(indicator_id)
    if config is None:
        return None
    return config.get_condition(condition_id)
