"""CLI commands for chartalerts.

This package provides the command-line interface for browsing the
condition registry, evaluating conditions, and rendering messages.
"""

from chartalerts.cli.main import cli, main

__all__ = ["cli", "main"]
