"""chartalerts - indicator alert conditions, evaluation and messages."""

from chartalerts.conditions import (
    build_condition,
    get_condition_template,
    get_indicator_config,
    is_alertable,
    list_alertable_indicators,
)
from chartalerts.evaluator import AlertEvaluator, PreviousValueCache
from chartalerts.messages import get_default_message_template, process_alert_message
from chartalerts.monitor import AlertMonitor

__all__ = [
    "AlertEvaluator",
    "AlertMonitor",
    "PreviousValueCache",
    "build_condition",
    "get_condition_template",
    "get_default_message_template",
    "get_indicator_config",
    "is_alertable",
    "list_alertable_indicators",
    "process_alert_message",
]
