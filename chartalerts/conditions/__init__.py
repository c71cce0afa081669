"""Alertable indicator catalog and condition templates."""

from chartalerts.conditions.registry import (
    INDICATOR_ALERT_CONFIGS,
    IndicatorAlertConfig,
    get_condition_template,
    get_indicator_config,
    is_alertable,
    list_alertable_indicators,
)
from chartalerts.conditions.builder import build_condition

__all__ = [
    "INDICATOR_ALERT_CONFIGS",
    "IndicatorAlertConfig",
    "build_condition",
    "get_condition_template",
    "get_indicator_config",
    "is_alertable",
    "list_alertable_indicators",
]
