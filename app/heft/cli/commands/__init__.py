"""CLI commands for heft.

This package contains all subcommand implementations.
"""

from heft.cli.commands import clean, config, diff, report, scan

__all__ = ["clean", "config", "diff", "report", "scan"]
