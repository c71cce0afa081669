"""Alert evaluator.

Decides whether an indicator alert condition fires on the current bar,
given the current and previous indicator snapshots (and prices for
price-based conditions).

Evaluation never raises. Missing operands, an absent previous bar, or a
malformed condition all yield False plus a log record, so one broken alert
cannot stop a loop evaluating many others.
"""

import logging
import math
from numbers import Real
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from chartalerts.evaluator.cache import PreviousValueCache
from chartalerts.models import (
    ChangeCondition,
    Condition,
    ConditionType,
    IndicatorSnapshot,
    LineCrossCondition,
    PriceInput,
    PriceSnapshot,
    ThresholdCondition,
    ZoneCondition,
    parse_condition,
)

logger = logging.getLogger(__name__)

Number = Optional[float]


# ============================================================================
# Predicates
# ============================================================================
# Each predicate returns False when any operand is None.

def check_cross_above(current: Number, previous: Number, threshold: Number) -> bool:
    """Value crosses above a threshold between two bars."""
    if current is None or previous is None or threshold is None:
        return False
    return previous <= threshold and current > threshold


def check_cross_below(current: Number, previous: Number, threshold: Number) -> bool:
    """Value crosses below a threshold between two bars."""
    if current is None or previous is None or threshold is None:
        return False
    return previous >= threshold and current < threshold


def check_greater_than(current: Number, threshold: Number) -> bool:
    if current is None or threshold is None:
        return False
    return current > threshold


def check_less_than(current: Number, threshold: Number) -> bool:
    if current is None or threshold is None:
        return False
    return current < threshold


def check_equals(current: Number, previous: Number, target: Number) -> bool:
    """Value changes *to* the target; holding at the target does not re-fire."""
    if current is None or previous is None or target is None:
        return False
    return previous != target and current == target


def in_zone(value: float, zone: tuple[float, float]) -> bool:
    low, high = zone
    return low <= value <= high


def check_enters_zone(current: Number, previous: Number, zone: tuple[float, float]) -> bool:
    if current is None or previous is None:
        return False
    return not in_zone(previous, zone) and in_zone(current, zone)


def check_exits_zone(current: Number, previous: Number, zone: tuple[float, float]) -> bool:
    if current is None or previous is None:
        return False
    return in_zone(previous, zone) and not in_zone(current, zone)


def check_within_zone(current: Number, zone: tuple[float, float]) -> bool:
    if current is None:
        return False
    return in_zone(current, zone)


def check_outside_zone(current: Number, zone: tuple[float, float]) -> bool:
    if current is None:
        return False
    return not in_zone(current, zone)


def check_line_cross_above(current1: Number, previous1: Number,
                           current2: Number, previous2: Number) -> bool:
    """Line 1 crosses above line 2 between two bars."""
    if None in (current1, previous1, current2, previous2):
        return False
    return previous1 <= previous2 and current1 > current2


def check_line_cross_below(current1: Number, previous1: Number,
                           current2: Number, previous2: Number) -> bool:
    """Line 1 crosses below line 2 between two bars."""
    if None in (current1, previous1, current2, previous2):
        return False
    return previous1 >= previous2 and current1 < current2


def check_increases_by(current: Number, previous: Number, amount: Number) -> bool:
    if current is None or previous is None or amount is None:
        return False
    return (current - previous) >= amount


def check_decreases_by(current: Number, previous: Number, amount: Number) -> bool:
    if current is None or previous is None or amount is None:
        return False
    return (previous - current) >= amount


def check_changes_by(current: Number, previous: Number, amount: Number) -> bool:
    if current is None or previous is None or amount is None:
        return False
    return abs(current - previous) >= amount


# ============================================================================
# Operand access
# ============================================================================

def to_number(value: Any) -> Number:
    """Coerce a snapshot value to a finite float, or None.

    Booleans, non-numbers, NaN (indicator warm-up) and infinities count as
    missing.
    """
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value):
        return None
    return value


def to_price(price: PriceInput) -> Number:
    """Close of a PriceSnapshot, or a bare number."""
    if isinstance(price, PriceSnapshot):
        return to_number(price.close)
    return to_number(price)


def _indicator_values(snapshot: Optional[IndicatorSnapshot],
                      indicator: str) -> Optional[Mapping[str, Any]]:
    if not isinstance(snapshot, Mapping):
        return None
    values = snapshot.get(indicator)
    if not isinstance(values, Mapping):
        return None
    return values


def _read(values: Optional[Mapping[str, Any]], series: Optional[str]) -> Number:
    if values is None or not series:
        return None
    return to_number(values.get(series))


# ============================================================================
# Evaluator
# ============================================================================

class AlertEvaluator:
    """Evaluates indicator alert conditions bar-by-bar.

    The evaluator itself holds no state except an optional
    ``PreviousValueCache`` used by ``evaluate_cached``. Pass one in to share
    it with other components; otherwise each evaluator gets its own.
    """

    def __init__(self, cache: Optional[PreviousValueCache] = None):
        self.cache = cache if cache is not None else PreviousValueCache()

    def evaluate(
        self,
        condition: Union[Condition, Mapping[str, Any]],
        current: IndicatorSnapshot,
        previous: Optional[IndicatorSnapshot] = None,
        current_price: PriceInput = None,
        previous_price: PriceInput = None,
    ) -> bool:
        """Evaluate a condition against the current and previous bar.

        Args:
            condition: Typed condition, or a raw mapping from host config.
            current: Indicator snapshot for the current bar.
            previous: Indicator snapshot for the previous bar (None on the
                first bar).
            current_price: Current price, used when the condition requires it.
            previous_price: Previous price.

        Returns:
            True if the alert should trigger on this bar. Never raises.
        """
        try:
            parsed = self._coerce(condition)
            if parsed is None:
                return False
            return self._dispatch(
                parsed, current, previous, to_price(current_price), to_price(previous_price)
            )
        except Exception:
            logger.exception("Error evaluating alert condition %r", _condition_id(condition))
            return False

    def evaluate_cached(
        self,
        alert_id: str,
        condition: Union[Condition, Mapping[str, Any]],
        current: IndicatorSnapshot,
        current_price: PriceInput = None,
    ) -> bool:
        """Evaluate using the cached previous bar of ``alert_id``.

        The current bar is cached afterwards, so the next call for the same
        alert sees it as its previous bar.
        """
        cached = self.cache.get(alert_id)
        previous, previous_price = (cached.indicators, cached.price) if cached else (None, None)

        result = self.evaluate(condition, current, previous, current_price, previous_price)

        if isinstance(current, Mapping):
            try:
                self.cache.store(alert_id, current, to_price(current_price))
            except Exception:
                logger.exception("Error caching bar for alert %s", alert_id)
                self.cache.remove_alert(alert_id)
        else:
            # an unusable bar breaks the chain of consecutive bars
            self.cache.remove_alert(alert_id)
        return result

    def remove_alert(self, alert_id: str) -> None:
        """Forget the cached previous bar of one alert."""
        self.cache.remove_alert(alert_id)

    def clear(self) -> None:
        """Forget all cached previous bars."""
        self.cache.clear()

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _coerce(self, condition: Any) -> Optional[Condition]:
        if isinstance(condition, (ThresholdCondition, ZoneCondition,
                                  LineCrossCondition, ChangeCondition)):
            return condition
        if isinstance(condition, Mapping):
            try:
                return parse_condition(condition)
            except ValidationError as e:
                logger.warning(
                    "Invalid alert condition %r (type=%r): %s",
                    condition.get("id"), condition.get("type"), e.errors(include_url=False),
                )
                return None
        logger.warning("Unsupported alert condition object: %r", type(condition).__name__)
        return None

    def _dispatch(self, condition: Condition, current: IndicatorSnapshot,
                  previous: Optional[IndicatorSnapshot],
                  current_price: Number, previous_price: Number) -> bool:
        try:
            ctype = ConditionType(condition.type)
        except ValueError:
            logger.warning("Unknown condition type: %r", condition.type)
            return False

        current_values = _indicator_values(current, condition.indicator)
        if current_values is None:
            logger.debug("Missing current data for indicator: %s", condition.indicator)
            return False
        previous_values = _indicator_values(previous, condition.indicator)

        if isinstance(condition, ThresholdCondition):
            return self._evaluate_threshold(
                ctype, condition, current_values, previous_values, current_price, previous_price
            )
        if isinstance(condition, ZoneCondition):
            return self._evaluate_zone(ctype, condition, current_values, previous_values)
        if isinstance(condition, LineCrossCondition):
            return self._evaluate_line_cross(ctype, condition, current_values, previous_values)
        if isinstance(condition, ChangeCondition):
            return self._evaluate_change(ctype, condition, current_values, previous_values)

        logger.warning("Unknown condition type: %r", condition.type)
        return False

    def _evaluate_threshold(self, ctype: ConditionType, condition: ThresholdCondition,
                            current_values: Mapping[str, Any],
                            previous_values: Optional[Mapping[str, Any]],
                            current_price: Number, previous_price: Number) -> bool:
        if condition.requires_price:
            # price crossing an indicator line, e.g. close vs VWAP
            current, previous = current_price, previous_price
        else:
            current = _read(current_values, condition.series)
            previous = _read(previous_values, condition.series)

        if condition.comparison:
            threshold = _read(current_values, condition.comparison)
        else:
            threshold = condition.threshold

        if current is None or threshold is None:
            _log_missing(condition, current=current, threshold=threshold)
            return False

        if ctype is ConditionType.GREATER_THAN:
            return check_greater_than(current, threshold)
        if ctype is ConditionType.LESS_THAN:
            return check_less_than(current, threshold)

        if previous is None:
            _log_missing(condition, previous=previous)
            return False

        if ctype is ConditionType.CROSSES_ABOVE:
            return check_cross_above(current, previous, threshold)
        if ctype is ConditionType.CROSSES_BELOW:
            return check_cross_below(current, previous, threshold)
        if ctype is ConditionType.EQUALS:
            return check_equals(current, previous, threshold)

        logger.warning("Condition type %s is not a threshold type", ctype.value)
        return False

    def _evaluate_zone(self, ctype: ConditionType, condition: ZoneCondition,
                       current_values: Mapping[str, Any],
                       previous_values: Optional[Mapping[str, Any]]) -> bool:
        zone = _valid_zone(condition)
        if zone is None:
            return False

        current = _read(current_values, condition.series)
        if current is None:
            _log_missing(condition, current=current)
            return False

        if ctype is ConditionType.WITHIN_ZONE:
            return check_within_zone(current, zone)
        if ctype is ConditionType.OUTSIDE_ZONE:
            return check_outside_zone(current, zone)

        previous = _read(previous_values, condition.series)
        if previous is None:
            _log_missing(condition, previous=previous)
            return False

        if ctype is ConditionType.ENTERS_ZONE:
            return check_enters_zone(current, previous, zone)
        if ctype is ConditionType.EXITS_ZONE:
            return check_exits_zone(current, previous, zone)

        logger.warning("Condition type %s is not a zone type", ctype.value)
        return False

    def _evaluate_line_cross(self, ctype: ConditionType, condition: LineCrossCondition,
                             current_values: Mapping[str, Any],
                             previous_values: Optional[Mapping[str, Any]]) -> bool:
        current1 = _read(current_values, condition.series1)
        current2 = _read(current_values, condition.series2)
        previous1 = _read(previous_values, condition.series1)
        previous2 = _read(previous_values, condition.series2)

        if None in (current1, current2, previous1, previous2):
            _log_missing(condition, current1=current1, current2=current2,
                         previous1=previous1, previous2=previous2)
            return False

        if ctype is ConditionType.LINE_CROSSES_ABOVE:
            return check_line_cross_above(current1, previous1, current2, previous2)
        if ctype is ConditionType.LINE_CROSSES_BELOW:
            return check_line_cross_below(current1, previous1, current2, previous2)

        logger.warning("Condition type %s is not a line cross type", ctype.value)
        return False

    def _evaluate_change(self, ctype: ConditionType, condition: ChangeCondition,
                         current_values: Mapping[str, Any],
                         previous_values: Optional[Mapping[str, Any]]) -> bool:
        current = _read(current_values, condition.series)
        previous = _read(previous_values, condition.series)
        amount = condition.amount

        if current is None or previous is None or amount is None:
            _log_missing(condition, current=current, previous=previous, amount=amount)
            return False

        if ctype is ConditionType.INCREASES_BY:
            return check_increases_by(current, previous, amount)
        if ctype is ConditionType.DECREASES_BY:
            return check_decreases_by(current, previous, amount)
        if ctype is ConditionType.CHANGES_BY:
            return check_changes_by(current, previous, amount)

        logger.warning("Condition type %s is not a change type", ctype.value)
        return False


def _valid_zone(condition: ZoneCondition) -> Optional[tuple[float, float]]:
    # model_construct() bypasses validation, so the zone is checked again here
    zone = condition.zone
    try:
        low, high = (to_number(bound) for bound in zone)
    except (TypeError, ValueError):
        low = high = None
    if low is None or high is None or low > high:
        logger.warning("Malformed zone %r on condition %s", zone, condition.id)
        return None
    return low, high


def _log_missing(condition: Condition, **operands: Number) -> None:
    missing = ", ".join(name for name, value in operands.items() if value is None)
    logger.debug(
        "Cannot evaluate %s/%s (%s): missing %s",
        condition.indicator, condition.id, condition.type, missing,
    )


def _condition_id(condition: Any) -> Any:
    if isinstance(condition, Mapping):
        return condition.get("id")
    return getattr(condition, "id", condition)
