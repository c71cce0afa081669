"""Tests for the condition registry and condition builder.

**Feature: indicator-alerts**
"""

import pytest
from pydantic import ValidationError

from chartalerts.conditions import (
    INDICATOR_ALERT_CONFIGS,
    build_condition,
    get_condition_template,
    get_indicator_config,
    is_alertable,
    list_alertable_indicators,
)
from chartalerts.errors import ConditionConfigError
from chartalerts.models import (
    ChangeCondition,
    LineCrossCondition,
    ThresholdCondition,
    ZoneCondition,
    parse_condition,
)


EXPECTED_INDICATORS = [
    "rsi", "macd", "stochastic", "atr", "bollingerBands", "supertrend", "vwap", "sma", "ema",
]


class TestRegistryLookups:

    def test_catalog_order(self):
        assert [c.id for c in list_alertable_indicators()] == EXPECTED_INDICATORS

    def test_is_alertable(self):
        assert is_alertable("rsi")
        assert is_alertable("bollingerBands")
        assert not is_alertable("obv")
        assert not is_alertable("RSI")

    def test_get_indicator_config(self):
        config = get_indicator_config("macd")
        assert config.name == "MACD"
        assert set(config.series) == {"macd", "signal", "histogram"}
        assert get_indicator_config("unknown") is None

    def test_get_condition_template(self):
        template = get_condition_template("rsi", "rsi_crosses_above")
        assert isinstance(template, ThresholdCondition)
        assert template.default_value == 70
        assert template.value_range == (0, 100)
        assert get_condition_template("rsi", "nope") is None
        assert get_condition_template("nope", "rsi_crosses_above") is None

    def test_price_templates(self):
        for indicator in ("vwap", "sma", "ema"):
            template = get_condition_template(indicator, f"price_crosses_{indicator}_up")
            assert template.requires_price is True
            assert template.comparison == "value"

    def test_stochastic_zones_use_k(self):
        template = get_condition_template("stochastic", "stoch_enters_overbought")
        assert isinstance(template, ZoneCondition)
        assert template.series == "k"
        assert template.zone == (80, 100)


class TestCatalogConsistency:
    """
    **Feature: indicator-alerts, Property 8: Catalog Consistency**

    *For any* template in the catalog, its operands exist on its indicator.
    """

    @pytest.mark.parametrize("config", list_alertable_indicators(), ids=lambda c: c.id)
    def test_templates_reference_published_series(self, config):
        ids = [c.id for c in config.conditions]
        assert len(ids) == len(set(ids)), "duplicate condition ids"
        assert config.conditions, "indicator without conditions"

        for condition in config.conditions:
            assert condition.indicator == config.id
            assert condition.label and condition.description
            if isinstance(condition, LineCrossCondition):
                assert condition.series1 in config.series
                assert condition.series2 in config.series
            elif isinstance(condition, ThresholdCondition) and condition.requires_price:
                assert condition.comparison in config.series
            else:
                assert condition.series in config.series

    @pytest.mark.parametrize("config", list_alertable_indicators(), ids=lambda c: c.id)
    def test_templates_round_trip_through_raw_form(self, config):
        for condition in config.conditions:
            raw = condition.model_dump(by_alias=True)
            assert parse_condition(raw) == condition

    def test_configs_are_frozen(self):
        with pytest.raises(ValidationError):
            INDICATOR_ALERT_CONFIGS["rsi"].name = "changed"


class TestBuildCondition:

    def test_default_value_applied(self):
        condition = build_condition(get_condition_template("atr", "atr_crosses_below"))
        assert condition.value == 5
        assert condition.threshold == 5

    def test_value_override(self):
        template = get_condition_template("rsi", "rsi_crosses_below")
        condition = build_condition(template, value=25)
        assert condition.value == 25
        assert template.value is None

    def test_value_out_of_range(self):
        with pytest.raises(ConditionConfigError, match="outside allowed range"):
            build_condition(get_condition_template("rsi", "rsi_crosses_above"), value=150)

    def test_zone_override(self):
        condition = build_condition(get_condition_template("rsi", "rsi_enters_overbought"),
                                    zone=[65, 95])
        assert condition.zone == (65, 95)

    def test_inverted_zone_rejected(self):
        with pytest.raises(ConditionConfigError):
            build_condition(get_condition_template("rsi", "rsi_exits_oversold"), zone=(30, 0))

    def test_zone_needs_two_bounds(self):
        with pytest.raises(ConditionConfigError, match="min, max"):
            build_condition(get_condition_template("rsi", "rsi_exits_oversold"), zone=(1, 2, 3))

    @pytest.mark.parametrize("indicator,condition_id", [
        ("macd", "macd_crosses_signal_up"),
        ("rsi", "rsi_enters_oversold"),
        ("bollingerBands", "price_crosses_lower_down"),
    ])
    def test_value_rejected(self, indicator, condition_id):
        with pytest.raises(ConditionConfigError):
            build_condition(get_condition_template(indicator, condition_id), value=1)

    def test_zone_rejected_on_threshold(self):
        with pytest.raises(ConditionConfigError, match="does not take a zone"):
            build_condition(get_condition_template("rsi", "rsi_crosses_above"), zone=(0, 1))

    def test_negative_change_amount(self):
        template = ChangeCondition(id="c", indicator="rsi", type="changes_by", series="value")
        with pytest.raises(ConditionConfigError):
            build_condition(template, value=-1)

    def test_template_without_overrides_is_returned(self):
        template = get_condition_template("macd", "macd_crosses_signal_down")
        assert build_condition(template) is template

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            build_condition(get_condition_template("atr", "atr_crosses_above"), value=-5)
