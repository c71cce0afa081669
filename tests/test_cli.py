"""Tests for the chartalerts command line.

**Feature: indicator-alerts**
"""

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from chartalerts.cli import cli
from chartalerts.cli.alerts import load_bars, parse_json_object, resolve_condition
from chartalerts.cli.catalog import describe_condition
from chartalerts.conditions import get_condition_template
from chartalerts.errors import ConditionConfigError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path: Path):
    """Run the CLI against an empty settings location."""
    def _invoke(*args):
        return runner.invoke(cli, ["--config", str(tmp_path / "none.toml"), *args])
    return _invoke


@pytest.fixture
def bars_file(tmp_path: Path) -> Path:
    rows = [
        {"time": "2024-01-02T09:15:00Z", "close": 100, "indicators": {"rsi": {"value": 60}}},
        {"time": "2024-01-02T09:16:00Z", "close": 101, "indicators": {"rsi": {"value": 72}}},
        {"time": "2024-01-02T09:17:00Z", "close": 99, "indicators": {"rsi": {"value": 65}}},
        {"time": "2024-01-02T09:18:00Z", "close": 103, "indicators": {"rsi": {"value": 75}}},
    ]
    path = tmp_path / "bars.jsonl"
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n\n")
    return path


class TestHelpers:

    def test_describe_condition(self):
        assert describe_condition(get_condition_template("macd", "macd_crosses_signal_up")) == (
            "macd / signal"
        )
        assert describe_condition(get_condition_template("rsi", "rsi_enters_overbought")) == (
            "value in [70, 100]"
        )
        assert describe_condition(
            get_condition_template("bollingerBands", "price_crosses_upper_up")
        ) == "price vs upper"
        assert describe_condition(get_condition_template("rsi", "rsi_crosses_above")) == (
            "value vs 70"
        )
        assert describe_condition(get_condition_template("rsi", "rsi_changes_by")) == (
            "value by 10"
        )

    def test_resolve_condition(self):
        assert resolve_condition("rsi", "rsi_crosses_above", value=65).value == 65
        with pytest.raises(LookupError):
            resolve_condition("obv", "x")
        with pytest.raises(LookupError):
            resolve_condition("rsi", "x")
        with pytest.raises(ConditionConfigError):
            resolve_condition("rsi", "rsi_crosses_above", value=500)

    def test_parse_json_object(self):
        assert parse_json_object(None, "--data") == {}
        assert parse_json_object('{"a": 1}', "--data") == {"a": 1}

    @pytest.mark.parametrize("text", ["{", "[1, 2]"])
    def test_parse_json_object_rejects(self, text):
        with pytest.raises(click.BadParameter):
            parse_json_object(text, "--data")

    def test_load_bars(self, bars_file: Path):
        bars = load_bars(bars_file)
        assert len(bars) == 4
        assert bars[1].price().close == 101
        assert bars[1].indicators == {"rsi": {"value": 72}}

    def test_load_bars_reports_line(self, tmp_path: Path):
        path = tmp_path / "bad.jsonl"
        path.write_text('{"close": 1}\n{"close": "x"}\n')
        with pytest.raises(ValueError, match="bad.jsonl:2"):
            load_bars(path)


class TestCatalogCommands:

    def test_indicators(self, invoke):
        result = invoke("indicators")
        assert result.exit_code == 0
        assert "Total: 9 indicators" in result.output

    def test_conditions(self, invoke):
        result = invoke("conditions", "rsi")
        assert result.exit_code == 0
        assert "RSI Alert Conditions" in result.output

    def test_conditions_unknown_indicator(self, invoke):
        result = invoke("conditions", "obv")
        assert result.exit_code == 1
        assert "no alert support" in result.output

    def test_placeholders(self, invoke):
        result = invoke("placeholders")
        assert result.exit_code == 0
        assert "{{alert.name}}" in result.output


class TestAlertCommands:

    def test_check_triggered(self, invoke):
        result = invoke("check", "rsi", "rsi_crosses_above",
                        "--previous", '{"value": 68}', "--current", '{"value": 72}')
        assert result.exit_code == 0
        assert "TRIGGERED" in result.output

    def test_check_first_bar(self, invoke):
        result = invoke("check", "rsi", "rsi_crosses_above", "--current", '{"value": 72}')
        assert result.exit_code == 0
        assert "not triggered" in result.output

    def test_check_price_condition(self, invoke):
        result = invoke("check", "vwap", "price_crosses_vwap_up", "--current", '{"value": 100}',
                        "--previous", '{"value": 100}', "--price", "101",
                        "--previous-price", "99")
        assert "TRIGGERED" in result.output

    def test_check_zone_override(self, invoke):
        result = invoke("check", "rsi", "rsi_enters_overbought", "--zone", "60", "100",
                        "--previous", '{"value": 55}', "--current", '{"value": 62}')
        assert "TRIGGERED" in result.output

    def test_check_bad_override(self, invoke):
        result = invoke("check", "macd", "macd_crosses_signal_up", "--value", "1",
                        "--current", "{}")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_check_bad_json(self, invoke):
        result = invoke("check", "rsi", "rsi_crosses_above", "--current", "{nope")
        assert result.exit_code == 2

    def test_replay_every_time(self, invoke, bars_file: Path):
        result = invoke("replay", str(bars_file), "rsi", "rsi_crosses_above",
                        "--symbol", "tcs", "--frequency", "every_time")
        assert result.exit_code == 0
        assert "2 triggers in 4 bars" in result.output

    def test_replay_once_per_bar(self, invoke, bars_file: Path):
        result = invoke("replay", str(bars_file), "rsi", "rsi_crosses_above", "--value", "70")
        assert result.exit_code == 0
        assert "1 triggers in 4 bars" in result.output

    def test_replay_no_triggers(self, invoke, bars_file: Path):
        result = invoke("replay", str(bars_file), "rsi", "rsi_crosses_above", "--value", "90")
        assert result.exit_code == 0
        assert "No triggers in 4 bars." in result.output

    def test_replay_uses_settings(self, runner, tmp_path: Path, bars_file: Path):
        config = tmp_path / "config.toml"
        config.write_text('[alerts]\nfrequency = "every_time"\n')
        result = runner.invoke(cli, ["--config", str(config), "replay", str(bars_file),
                                     "rsi", "rsi_crosses_above"])
        assert "2 triggers in 4 bars" in result.output

    def test_replay_unknown_condition(self, invoke, bars_file: Path):
        result = invoke("replay", str(bars_file), "rsi", "rsi_wiggles")
        assert result.exit_code == 1
        assert "Replay Failed" in result.output

    def test_render_template(self, invoke):
        data = json.dumps({"symbol": "TCS", "close": 3500.1, "indicators": {"rsi": {"value": 72.345}}})
        result = invoke("render", "{{symbol}} RSI crossed {{rsi}} at {{close}}", "--data", data)
        assert result.exit_code == 0
        assert "TCS RSI crossed 72.35 at 3500.10" in result.output

    def test_render_default_template(self, invoke):
        result = invoke("render", "--indicator", "rsi", "--condition", "rsi_enters_overbought")
        assert result.exit_code == 0
        assert "{{symbol}} rsi entered zone [70-100]" in result.output

    def test_render_needs_template(self, invoke):
        result = invoke("render")
        assert result.exit_code == 1

    def test_render_with_out_of_range_values(self, invoke):
        data = '{"symbol": "TCS", "time": 1e20, "indicators": {"rsi": {"value": 1e400}}}'
        result = invoke("render", "{{symbol}} {{rsi}}", "--data", data)
        assert result.exit_code == 0
        assert "TCS N/A" in result.output


class TestConfigHandling:

    def test_invalid_config_file(self, runner, tmp_path: Path):
        config = tmp_path / "config.toml"
        config.write_text('[logging]\nlevel = "LOUD"\n')
        result = runner.invoke(cli, ["--config", str(config), "indicators"])
        assert result.exit_code == 1
        assert "Configuration Error" in result.output
