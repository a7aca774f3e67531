"""CLI package for heft.

This package contains the Typer application and all subcommands.
"""

from heft.cli.main import app

__all__ = ["app"]
