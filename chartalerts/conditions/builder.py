"""Turn a registry template into a configured condition instance."""

from typing import Optional, Sequence

from pydantic import ValidationError

from chartalerts.errors import ConditionConfigError
from chartalerts.models import (
    ChangeCondition,
    Condition,
    ThresholdCondition,
    ZoneCondition,
)


def build_condition(
    template: Condition,
    *,
    value: Optional[float] = None,
    zone: Optional[Sequence[float]] = None,
) -> Condition:
    """Apply user overrides to a condition template.

    ``value`` falls back to the template's default value. Overrides that
    the template's type does not take are rejected.

    Args:
        template: Condition template from the registry.
        value: Threshold or change amount chosen by the user.
        zone: ``(min, max)`` bounds chosen by the user.

    Returns:
        A new frozen condition carrying the overrides.

    Raises:
        ConditionConfigError: If an override does not fit the template.
    """
    updates: dict = {}

    if value is not None:
        if not isinstance(template, (ThresholdCondition, ChangeCondition)):
            raise ConditionConfigError(
                f"Condition '{template.id}' ({template.type}) does not take a value"
            )
        if isinstance(template, ThresholdCondition) and template.comparison:
            raise ConditionConfigError(
                f"Condition '{template.id}' compares against '{template.comparison}', "
                "not a fixed value"
            )
        if template.value_range is not None:
            low, high = template.value_range
            if not low <= value <= high:
                raise ConditionConfigError(
                    f"Value {value} outside allowed range [{low}, {high}] "
                    f"for condition '{template.id}'"
                )
        updates["value"] = value
    elif isinstance(template, (ThresholdCondition, ChangeCondition)):
        if template.value is None and template.default_value is not None:
            updates["value"] = template.default_value

    if zone is not None:
        if not isinstance(template, ZoneCondition):
            raise ConditionConfigError(
                f"Condition '{template.id}' ({template.type}) does not take a zone"
            )
        zone = tuple(zone)
        if len(zone) != 2:
            raise ConditionConfigError(f"Zone must be (min, max), got {zone!r}")
        updates["zone"] = zone

    if not updates:
        return template

    try:
        return type(template).model_validate({**template.model_dump(), **updates})
    except ValidationError as e:
        raise ConditionConfigError(
            f"Invalid override for condition '{template.id}': {e}"
        ) from e
