"""Alert evaluation commands for chartalerts CLI.

Checks a single condition against a pair of snapshots, replays a file of
bars through the alert monitor, and renders message templates.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chartalerts.conditions import build_condition, get_condition_template, get_indicator_config
from chartalerts.config import Settings
from chartalerts.errors import ConditionConfigError
from chartalerts.evaluator import AlertEvaluator
from chartalerts.messages import get_default_message_template, process_alert_message
from chartalerts.models import (
    AlertFrequency,
    AlertTrigger,
    Condition,
    IndicatorAlert,
    PriceSnapshot,
)
from chartalerts.monitor import AlertMonitor

console = Console()


class ReplayBar(BaseModel):
    """One line of a replay file."""

    time: Optional[datetime] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[float] = None
    indicators: dict[str, dict[str, Optional[float]]] = Field(default_factory=dict)

    def price(self) -> Optional[PriceSnapshot]:
        if self.close is None:
            return None
        return PriceSnapshot(
            open=self.open, high=self.high, low=self.low, close=self.close,
            volume=self.volume, timestamp=self.time,
        )


def _error(title: str, message: str) -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def resolve_condition(indicator: str, condition_id: str, value: Optional[float] = None,
                      zone: Optional[tuple[float, float]] = None) -> Condition:
    """Look up a condition template and apply user overrides.

    Args:
        indicator: Indicator id.
        condition_id: Condition template id.
        value: Threshold or change amount override.
        zone: Zone override.

    Returns:
        The configured condition.

    Raises:
        LookupError: If the indicator or condition is unknown.
        ConditionConfigError: If an override does not fit the template.
    """
    if get_indicator_config(indicator) is None:
        raise LookupError(f"Indicator '{indicator}' has no alert support")
    template = get_condition_template(indicator, condition_id)
    if template is None:
        raise LookupError(f"Indicator '{indicator}' has no condition '{condition_id}'")
    return build_condition(template, value=value, zone=zone)


def parse_json_object(text: Optional[str], what: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line."""
    if text is None:
        return {}
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise click.BadParameter(f"{what} must be a JSON object")
    return parsed


def load_bars(path: Path) -> list[ReplayBar]:
    """Read a JSON-lines replay file. Blank lines are skipped.

    Raises:
        ValueError: If a line is not a valid bar, with its line number.
    """
    bars = []
    with path.open() as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                bars.append(ReplayBar.model_validate_json(line))
            except ValidationError as e:
                raise ValueError(f"{path}:{lineno}: invalid bar: {e}") from e
    return bars


def replay_bars(alert: IndicatorAlert, bars: list[ReplayBar]) -> list[AlertTrigger]:
    """Feed bars through a monitor holding a single alert."""
    monitor = AlertMonitor(default_exchange=alert.exchange)
    monitor.add_alert(alert)
    triggers = []
    for bar in bars:
        triggers.extend(monitor.process_bar(alert.symbol, bar.indicators, bar.price(), bar.time))
    return triggers


@click.command("check")
@click.argument("indicator")
@click.argument("condition_id", metavar="CONDITION")
@click.option("--current", "current_json", required=True,
              help='Current series values as JSON, e.g. \'{"value": 72}\'.')
@click.option("--previous", "previous_json", default=None,
              help="Previous series values as JSON (omit for the first bar).")
@click.option("--price", type=float, default=None, help="Current price.")
@click.option("--previous-price", type=float, default=None, help="Previous price.")
@click.option("--value", type=float, default=None, help="Threshold or change amount.")
@click.option("--zone", type=(float, float), default=None, help="Zone bounds MIN MAX.")
def check(indicator: str, condition_id: str, current_json: str, previous_json: Optional[str],
          price: Optional[float], previous_price: Optional[float],
          value: Optional[float], zone: Optional[tuple[float, float]]) -> None:
    """Evaluate one condition against a current and previous bar.

    INDICATOR is the indicator id; CONDITION is one of its condition ids.

    \b
    Examples:
      chartalerts check rsi rsi_crosses_above --previous '{"value": 68}' --current '{"value": 72}'
      chartalerts check vwap price_crosses_vwap_up --current '{"value": 100}' \\
          --price 101 --previous-price 99
    """
    try:
        condition = resolve_condition(indicator, condition_id, value, zone)
    except (LookupError, ConditionConfigError) as e:
        _error("Error", str(e))

    current = {indicator: parse_json_object(current_json, "--current")}
    previous = {indicator: parse_json_object(previous_json, "--previous")} if previous_json else None

    fired = AlertEvaluator().evaluate(condition, current, previous, price, previous_price)

    status = "[bold green]TRIGGERED[/bold green]" if fired else "[dim]not triggered[/dim]"
    console.print(Panel(
        f"Indicator: {indicator}\n"
        f"Condition: {condition.id} ({condition.type})\n"
        f"Result:    {status}",
        title="[bold]Alert Check[/bold]",
        border_style="green" if fired else "dim",
    ))


@click.command("replay")
@click.argument("bars_file", metavar="FILE",
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("indicator")
@click.argument("condition_id", metavar="CONDITION")
@click.option("--symbol", default="SYMBOL", help="Symbol used in messages.")
@click.option("--exchange", default=None, help="Exchange code (default from settings).")
@click.option("--value", type=float, default=None, help="Threshold or change amount.")
@click.option("--zone", type=(float, float), default=None, help="Zone bounds MIN MAX.")
@click.option("--message", default="", help="Message template (default derived from condition).")
@click.option("--frequency", type=click.Choice([f.value for f in AlertFrequency]), default=None,
              help="once_per_bar retires the alert after its first trigger.")
@click.pass_context
def replay(ctx: click.Context, bars_file: Path, indicator: str, condition_id: str, symbol: str,
           exchange: Optional[str], value: Optional[float], zone: Optional[tuple[float, float]],
           message: str, frequency: Optional[str]) -> None:
    """Replay a JSON-lines bar file through an alert.

    Each line of FILE is one bar:
    {"time": ..., "close": ..., "indicators": {"rsi": {"value": 71.2}}}

    \b
    Examples:
      chartalerts replay bars.jsonl rsi rsi_crosses_above --value 65
      chartalerts replay bars.jsonl macd macd_crosses_signal_up --frequency every_time
    """
    settings: Settings = (ctx.obj or {}).get("settings") or Settings()

    try:
        condition = resolve_condition(indicator, condition_id, value, zone)
        alert = IndicatorAlert(
            symbol=symbol.upper(),
            exchange=exchange or settings.default_exchange,
            indicator=indicator,
            condition=condition,
            message=message,
            frequency=frequency or settings.default_frequency,
            interval=settings.default_interval,
        )
        bars = load_bars(bars_file)
    except (LookupError, ValueError) as e:
        _error("Replay Failed", str(e))

    triggers = replay_bars(alert, bars)

    if not triggers:
        console.print(Panel(
            f"[dim]No triggers in {len(bars)} bars.[/dim]",
            title=f"[bold]{condition.label or condition.id}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title=f"Triggers: {condition.label or condition.id}",
                  show_header=True, header_style="bold cyan")
    table.add_column("Bar Time", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Message")
    for trigger in triggers:
        bar_time = trigger.bar_time.strftime("%Y-%m-%d %H:%M") if trigger.bar_time else "-"
        price = f"{trigger.price:.2f}" if trigger.price is not None else "-"
        table.add_row(bar_time, price, Text(trigger.message))

    console.print(table)
    console.print(f"\n[dim]{len(triggers)} triggers in {len(bars)} bars[/dim]")


@click.command("render")
@click.argument("template", required=False)
@click.option("--data", "data_json", default=None, help="Data bag as a JSON object.")
@click.option("--indicator", default=None, help="Print the default template of this indicator...")
@click.option("--condition", "condition_id", default=None, help="...and this condition.")
def render(template: Optional[str], data_json: Optional[str], indicator: Optional[str],
           condition_id: Optional[str]) -> None:
    """Render an alert message template.

    TEMPLATE may contain {{token}} placeholders; see 'chartalerts placeholders'.

    \b
    Examples:
      chartalerts render "{{symbol}} RSI {{rsi}}" --data '{"symbol": "TCS", "indicators": {"rsi": {"value": 72.3}}}'
      chartalerts render --indicator rsi --condition rsi_enters_overbought
    """
    if template is None:
        if not (indicator and condition_id):
            _error("Error", "Give a TEMPLATE, or --indicator and --condition")
        try:
            template = get_default_message_template(resolve_condition(indicator, condition_id))
        except LookupError as e:
            _error("Error", str(e))

    data = parse_json_object(data_json, "--data")
    console.print(process_alert_message(template, data), markup=False, highlight=False)
