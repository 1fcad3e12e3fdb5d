"""Unit tests for config commands."""

from pathlib import Path

from reclaim.cli.main import app
from reclaim.core.config import ReclaimConfig, load_config
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigInit:
    """Tests for reclaim config init."""

    def test_writes_defaults(self, isolated_config: Path) -> None:
        """init creates config.toml with the default settings."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert load_config(isolated_config / "config.toml") == ReclaimConfig()

    def test_refuses_to_overwrite(self, isolated_config: Path) -> None:
        """An existing file is kept unless --force is given."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("large_file_min_age_days = 3\n")

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "Config already exists" in result.output
        assert load_config(isolated_config / "config.toml").large_file_min_age_days == 3

    def test_force_overwrites(self, isolated_config: Path) -> None:
        """--force replaces the file with defaults."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("large_file_min_age_days = 3\n")

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert load_config(isolated_config / "config.toml").large_file_min_age_days == 30


class TestConfigShow:
    """Tests for reclaim config show."""

    def test_json(self, isolated_config: Path) -> None:
        """JSON output lists every setting."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("large_file_threshold_mb = 5\n")

        result = runner.invoke(app, ["config", "show", "--format", "json"])

        assert result.exit_code == 0
        assert '"large_file_threshold_mb": 5' in result.output
        assert '"helper_socket": "/run/reclaim-helper.sock"' in result.output

    def test_table(self) -> None:
        """The table shows setting names."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "helper_timeout_seconds" in result.output

    def test_invalid_config(self, isolated_config: Path) -> None:
        """Broken files exit with an error."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("not toml [")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Invalid TOML syntax" in result.output
