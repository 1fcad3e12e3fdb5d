"""Unit tests for exclude commands."""

import tomllib
from pathlib import Path

from reclaim.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestExcludeCommands:
    """Tests for reclaim exclude add/remove/list."""

    def test_add_persists_normalized_path(self, isolated_config: Path, tmp_path: Path) -> None:
        """Added paths are normalized and written to exclusions.toml."""
        target = tmp_path / "keep"

        result = runner.invoke(app, ["exclude", "add", f"{target}/"])

        assert result.exit_code == 0
        with open(isolated_config / "exclusions.toml", "rb") as f:
            assert tomllib.load(f)["excluded_paths"] == [str(target)]

    def test_add_twice(self, tmp_path: Path) -> None:
        """Adding an excluded path again is harmless."""
        runner.invoke(app, ["exclude", "add", str(tmp_path)])

        result = runner.invoke(app, ["exclude", "add", str(tmp_path)])

        assert result.exit_code == 0
        assert "Already excluded" in result.output

    def test_add_root_is_rejected(self) -> None:
        """The filesystem root is not a valid exclusion."""
        result = runner.invoke(app, ["exclude", "add", "/"])

        assert result.exit_code == 1
        assert "Not a valid exclusion" in result.output

    def test_list(self, tmp_path: Path) -> None:
        """Listed paths are sorted."""
        runner.invoke(app, ["exclude", "add", str(tmp_path / "b")])
        runner.invoke(app, ["exclude", "add", str(tmp_path / "a")])

        result = runner.invoke(app, ["exclude", "list"])

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.strip()]
        assert lines == [str(tmp_path / "a"), str(tmp_path / "b")]

    def test_list_empty(self) -> None:
        """An empty list says so."""
        result = runner.invoke(app, ["exclude", "list"])

        assert "No excluded paths." in result.output

    def test_remove(self, tmp_path: Path) -> None:
        """Removing releases the path."""
        runner.invoke(app, ["exclude", "add", str(tmp_path)])

        result = runner.invoke(app, ["exclude", "remove", str(tmp_path)])
        listed = runner.invoke(app, ["exclude", "list"])

        assert result.exit_code == 0
        assert "No excluded paths." in listed.output

    def test_remove_unknown(self, tmp_path: Path) -> None:
        """Removing a path that is not excluded fails."""
        result = runner.invoke(app, ["exclude", "remove", str(tmp_path)])

        assert result.exit_code == 1
        assert "Not excluded" in result.output
