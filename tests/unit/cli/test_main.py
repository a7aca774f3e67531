"""Unit tests for the root command and logging setup."""

import logging

import pytest
from heft import __version__
from heft.cli.main import app, configure_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for the root Typer app."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"heft version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        """--help lists every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("scan", "report", "diff", "clean", "config"):
            assert command in result.output

    def test_scan_help(self) -> None:
        """scan --help documents its options."""
        result = runner.invoke(app, ["scan", "--help"])

        assert result.exit_code == 0
        assert "--roots" in result.output


class TestConfigureLogging:
    """Tests for configure_logging()."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "level"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, level: int) -> None:
        """--verbose lowers and --quiet raises the root log level."""
        configure_logging(verbose, quiet)
        assert logging.getLogger().level == level
