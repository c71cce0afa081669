"""Registry browsing commands for chartalerts CLI.

Lists alertable indicators, their condition templates, and the message
placeholders available to alert messages.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chartalerts.conditions import get_indicator_config, list_alertable_indicators
from chartalerts.messages import AVAILABLE_PLACEHOLDERS
from chartalerts.models import (
    ChangeCondition,
    Condition,
    LineCrossCondition,
    ThresholdCondition,
    ZoneCondition,
)

console = Console()


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def describe_condition(condition: Condition) -> str:
    """Summarize the operands of a condition in one line.

    Args:
        condition: Condition template or instance.

    Returns:
        Short operand description, e.g. "value vs 70" or "macd / signal".
    """
    if isinstance(condition, LineCrossCondition):
        return f"{condition.series1} / {condition.series2}"
    if isinstance(condition, ZoneCondition):
        low, high = condition.zone
        return f"{condition.series} in [{_num(low)}, {_num(high)}]"
    if isinstance(condition, ThresholdCondition):
        lhs = "price" if condition.requires_price else condition.series
        if condition.comparison:
            return f"{lhs} vs {condition.comparison}"
        threshold = condition.threshold
        return f"{lhs} vs {_num(threshold) if threshold is not None else '?'}"
    if isinstance(condition, ChangeCondition):
        amount = condition.amount
        return f"{condition.series} by {_num(amount) if amount is not None else '?'}"
    return ""


@click.command("indicators")
def indicators() -> None:
    """List indicators that support alerts.

    \b
    Examples:
      chartalerts indicators
    """
    table = Table(title="Alertable Indicators", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Series", style="dim")
    table.add_column("Conditions", justify="right")

    configs = list_alertable_indicators()
    for config in configs:
        table.add_row(config.id, config.name, ", ".join(config.series), str(len(config.conditions)))

    console.print(table)
    console.print(f"\n[dim]Total: {len(configs)} indicators[/dim]")
    console.print("[dim]Use 'chartalerts conditions ID' to see an indicator's conditions[/dim]")


@click.command("conditions")
@click.argument("indicator")
def conditions(indicator: str) -> None:
    """List the condition templates of an indicator.

    INDICATOR is the indicator id (e.g., rsi, macd, bollingerBands).

    \b
    Examples:
      chartalerts conditions rsi
      chartalerts conditions supertrend
    """
    config = get_indicator_config(indicator)
    if config is None:
        known = ", ".join(c.id for c in list_alertable_indicators())
        console.print(Panel(
            f"[red]Indicator '{indicator}' has no alert support[/red]\n\n"
            f"[bold]Alertable indicators:[/bold]\n  {known}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    table = Table(
        title=f"{config.name} Alert Conditions",
        caption=config.description,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("ID", style="bold")
    table.add_column("Type")
    table.add_column("Operands")
    table.add_column("Description", style="dim")

    for condition in config.conditions:
        table.add_row(condition.id, condition.type, describe_condition(condition),
                      condition.description)

    console.print(table)


@click.command("placeholders")
def placeholders() -> None:
    """List the tokens available in alert message templates.

    \b
    Examples:
      chartalerts placeholders
    """
    table = Table(title="Message Placeholders", show_header=True, header_style="bold cyan")
    table.add_column("Group", style="dim")
    table.add_column("Token", style="bold")
    table.add_column("Description")

    for group in ("general", "price", "alert"):
        for item in AVAILABLE_PLACEHOLDERS[group]:
            table.add_row(group, item["token"], item["description"])
    for indicator_id, items in AVAILABLE_PLACEHOLDERS["indicators"].items():
        for item in items:
            table.add_row(indicator_id, item["token"], item["description"])

    console.print(table)
    console.print("[dim]Any indicator series also works as {{indicatorId.series}}[/dim]")
