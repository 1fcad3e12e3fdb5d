"""Unit tests for the main CLI application."""

import logging

from reclaim import __version__
from reclaim.cli.main import app, configure_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"reclaim version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        """--help lists every command group."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("scan", "clean", "exclude", "config", "helper"):
            assert command in result.output


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_verbose_enables_debug(self) -> None:
        """Verbose mode logs at DEBUG."""
        configure_logging(True)

        assert logging.getLogger().level == logging.DEBUG

    def test_default_is_warning(self) -> None:
        """The default level is WARNING."""
        configure_logging(False)

        assert logging.getLogger().level == logging.WARNING
