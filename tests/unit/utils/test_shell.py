"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from reclaim.utils.shell import CommandResult, command_exists, run_command


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success_property(self) -> None:
        """success is True only for exit code 0."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=126).success

    def test_output_joins_streams(self) -> None:
        """output combines non-empty stripped streams."""
        result = CommandResult(stdout="done\n", stderr="  warning  ", returncode=0)

        assert result.output == "done\nwarning"

    def test_output_skips_blank_streams(self) -> None:
        """Blank streams are left out."""
        assert CommandResult(stdout="", stderr="oops\n", returncode=1).output == "oops"


class TestRunCommand:
    """Tests for run_command function."""

    @patch("reclaim.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command returns captured streams and exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["pkexec", "true"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False

    @patch("reclaim.utils.shell.subprocess.run")
    def test_passes_timeout(self, mock_run: MagicMock) -> None:
        """A disabled timeout is forwarded for long administrator prompts."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["pkexec", "true"], timeout=None)

        assert mock_run.call_args.kwargs["timeout"] is None

    @patch("reclaim.utils.shell.subprocess.run")
    def test_propagates_timeout(self, mock_run: MagicMock) -> None:
        """TimeoutExpired reaches the caller."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["sleep"], timeout=1)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["sleep", "10"], timeout=1)

    def test_raises_file_not_found(self) -> None:
        """Missing executables raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            run_command(["reclaim-definitely-missing-binary"])


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("reclaim.utils.shell.shutil.which", return_value="/usr/bin/pkexec")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH exist."""
        assert command_exists("pkexec")
        mock_which.assert_called_once_with("pkexec")

    @patch("reclaim.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """Commands not on PATH do not exist."""
        assert not command_exists("osascript")
