"""Alert condition evaluation."""

from chartalerts.evaluator.cache import CachedBar, PreviousValueCache
from chartalerts.evaluator.evaluator import (
    AlertEvaluator,
    check_changes_by,
    check_cross_above,
    check_cross_below,
    check_decreases_by,
    check_enters_zone,
    check_equals,
    check_exits_zone,
    check_greater_than,
    check_increases_by,
    check_less_than,
    check_line_cross_above,
    check_line_cross_below,
    check_outside_zone,
    check_within_zone,
    in_zone,
    to_number,
    to_price,
)

__all__ = [
    "AlertEvaluator",
    "CachedBar",
    "PreviousValueCache",
    "check_changes_by",
    "check_cross_above",
    "check_cross_below",
    "check_decreases_by",
    "check_enters_zone",
    "check_equals",
    "check_exits_zone",
    "check_greater_than",
    "check_increases_by",
    "check_less_than",
    "check_line_cross_above",
    "check_line_cross_below",
    "check_outside_zone",
    "check_within_zone",
    "in_zone",
    "to_number",
    "to_price",
]
