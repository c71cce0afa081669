"""Alert condition models.

A condition is a tagged union keyed by ``type``. Each variant carries only
the operands its predicate needs, so a zone condition always has a zone and
a line crossover always has two series.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ConditionType(str, Enum):
    """Closed set of supported alert condition types."""

    # Value-based (single value comparison)
    CROSSES_ABOVE = "crosses_above"
    CROSSES_BELOW = "crosses_below"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EQUALS = "equals"

    # Zone-based (range comparison)
    ENTERS_ZONE = "enters_zone"
    EXITS_ZONE = "exits_zone"
    WITHIN_ZONE = "within_zone"
    OUTSIDE_ZONE = "outside_zone"

    # Crossover (two series comparison)
    LINE_CROSSES_ABOVE = "line_crosses_above"
    LINE_CROSSES_BELOW = "line_crosses_below"

    # Change-based
    INCREASES_BY = "increases_by"
    DECREASES_BY = "decreases_by"
    CHANGES_BY = "changes_by"


EDGE_TRIGGERED_TYPES = frozenset({
    ConditionType.CROSSES_ABOVE,
    ConditionType.CROSSES_BELOW,
    ConditionType.EQUALS,
    ConditionType.ENTERS_ZONE,
    ConditionType.EXITS_ZONE,
    ConditionType.LINE_CROSSES_ABOVE,
    ConditionType.LINE_CROSSES_BELOW,
})

LEVEL_TRIGGERED_TYPES = frozenset({
    ConditionType.GREATER_THAN,
    ConditionType.LESS_THAN,
    ConditionType.WITHIN_ZONE,
    ConditionType.OUTSIDE_ZONE,
})

DELTA_TYPES = frozenset({
    ConditionType.INCREASES_BY,
    ConditionType.DECREASES_BY,
    ConditionType.CHANGES_BY,
})


class _ConditionBase(BaseModel):
    """Fields shared by every condition variant."""

    id: str = Field(..., min_length=1, description="Condition id, unique per indicator")
    indicator: str = Field(..., min_length=1, description="Owning indicator id")
    label: str = Field(default="", description="Display label")
    description: str = Field(default="", description="Display description")

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ThresholdCondition(_ConditionBase):
    """Compares one series (or the price) against a threshold.

    The threshold is ``value`` (falling back to ``default_value``), or the
    ``comparison`` field of the current indicator snapshot when set.
    """

    type: Literal[
        "crosses_above",
        "crosses_below",
        "greater_than",
        "less_than",
        "equals",
    ]
    series: str = Field(..., min_length=1, description="Series read from the snapshot")
    value: Optional[float] = Field(default=None, description="Fixed threshold")
    default_value: Optional[float] = Field(default=None, description="Template default threshold")
    comparison: Optional[str] = Field(
        default=None, description="Snapshot field used as a dynamic threshold"
    )
    requires_price: bool = Field(
        default=False, description="Left-hand side is the external price"
    )
    value_range: Optional[tuple[float, float]] = Field(
        default=None, description="Allowed (min, max) for user supplied values"
    )
    value_step: Optional[float] = Field(default=None, gt=0, description="Input step")

    @property
    def threshold(self) -> Optional[float]:
        """Fixed threshold, or None when the condition uses a comparison field."""
        return self.value if self.value is not None else self.default_value


class ZoneCondition(_ConditionBase):
    """Compares one series against an inclusive ``[min, max]`` zone."""

    type: Literal[
        "enters_zone",
        "exits_zone",
        "within_zone",
        "outside_zone",
    ]
    series: str = Field(..., min_length=1)
    zone: tuple[float, float] = Field(..., description="Inclusive (min, max) bounds")

    @field_validator("zone")
    @classmethod
    def _ordered_zone(cls, zone: tuple[float, float]) -> tuple[float, float]:
        if zone[0] > zone[1]:
            raise ValueError(f"zone min {zone[0]} is greater than max {zone[1]}")
        return zone

    def contains(self, value: float) -> bool:
        low, high = self.zone
        return low <= value <= high


class LineCrossCondition(_ConditionBase):
    """One series crossing another on the same indicator."""

    type: Literal[
        "line_crosses_above",
        "line_crosses_below",
    ]
    series1: str = Field(..., min_length=1, description="Crossing line")
    series2: str = Field(..., min_length=1, description="Reference line")

    @model_validator(mode="after")
    def _distinct_series(self) -> "LineCrossCondition":
        if self.series1 == self.series2:
            raise ValueError("series1 and series2 must differ")
        return self


class ChangeCondition(_ConditionBase):
    """Bar-over-bar change of one series by at least ``value``."""

    type: Literal[
        "increases_by",
        "decreases_by",
        "changes_by",
    ]
    series: str = Field(..., min_length=1)
    value: Optional[float] = Field(default=None, ge=0, description="Change amount")
    default_value: Optional[float] = Field(default=None, ge=0)
    value_range: Optional[tuple[float, float]] = None
    value_step: Optional[float] = Field(default=None, gt=0)

    @property
    def amount(self) -> Optional[float]:
        return self.value if self.value is not None else self.default_value


Condition = Annotated[
    Union[ThresholdCondition, ZoneCondition, LineCrossCondition, ChangeCondition],
    Field(discriminator="type"),
]

_condition_adapter: TypeAdapter[Condition] = TypeAdapter(Condition)


def parse_condition(raw: Mapping[str, Any]) -> Condition:
    """Validate a raw mapping (snake_case or camelCase keys) into a condition.

    Raises:
        pydantic.ValidationError: If the type is unknown or operands are invalid.
    """
    return _condition_adapter.validate_python(dict(raw))
