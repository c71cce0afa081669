"""Main CLI entry point for chartalerts.

This module provides the main click group and lazy loading
for command modules to keep startup fast.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from chartalerts.config import load_settings
from chartalerts.errors import ConfigError

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Load a command from its module path; commands are matched by name."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    # Registry
    "indicators": "chartalerts.cli.catalog",
    "conditions": "chartalerts.cli.catalog",
    "placeholders": "chartalerts.cli.catalog",
    # Evaluation
    "check": "chartalerts.cli.alerts",
    "replay": "chartalerts.cli.alerts",
    "render": "chartalerts.cli.alerts",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def setup_logging(level: str) -> None:
    """Route library logging through rich on stderr."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        root.setLevel(level)
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="chartalerts")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.config/chartalerts/config.toml).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log evaluation diagnostics.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """chartalerts - indicator alert conditions for chart data.

    Browse the alertable indicators and their conditions, evaluate a
    condition against indicator snapshots, replay a bar file through
    the alert monitor, and render alert message templates.

    \b
    Quick Start:
      chartalerts indicators              # Alertable indicators
      chartalerts conditions rsi          # RSI condition templates
      chartalerts replay bars.jsonl rsi rsi_crosses_above
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        console.print(Panel(
            f"[red]{e}[/red]",
            title="[bold red]Configuration Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    setup_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
