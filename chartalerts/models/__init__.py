"""Data models for chartalerts."""

from chartalerts.models.condition import (
    DELTA_TYPES,
    EDGE_TRIGGERED_TYPES,
    LEVEL_TRIGGERED_TYPES,
    ChangeCondition,
    Condition,
    ConditionType,
    LineCrossCondition,
    ThresholdCondition,
    ZoneCondition,
    parse_condition,
)
from chartalerts.models.snapshot import IndicatorSnapshot, PriceInput, PriceSnapshot
from chartalerts.models.alert import (
    AlertFrequency,
    AlertStatus,
    AlertTrigger,
    IndicatorAlert,
)

__all__ = [
    "DELTA_TYPES",
    "EDGE_TRIGGERED_TYPES",
    "LEVEL_TRIGGERED_TYPES",
    "ChangeCondition",
    "Condition",
    "ConditionType",
    "LineCrossCondition",
    "ThresholdCondition",
    "ZoneCondition",
    "parse_condition",
    "IndicatorSnapshot",
    "PriceInput",
    "PriceSnapshot",
    "AlertFrequency",
    "AlertStatus",
    "AlertTrigger",
    "IndicatorAlert",
]
