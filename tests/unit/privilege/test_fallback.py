"""Unit tests for the administrator shell fallback."""

from unittest.mock import MagicMock, patch

import pytest
from reclaim.privilege.fallback import AdminShellRemover
from reclaim.privilege.models import FailureReason
from reclaim.utils.shell import CommandResult


class TestBuildCommand:
    """Tests for AdminShellRemover.build_command."""

    def test_linux_uses_pkexec(self) -> None:
        """Linux runs rm through pkexec and sh."""
        command = AdminShellRemover(platform="linux").build_command(["/tmp/a", "/tmp/b c"])

        assert command == ["pkexec", "/bin/sh", "-c", "rm -rf -- /tmp/a '/tmp/b c'"]

    def test_quotes_shell_metacharacters(self) -> None:
        """Paths cannot inject shell syntax."""
        command = AdminShellRemover(platform="linux").build_command(["/tmp/x; reboot"])

        assert command[-1] == "rm -rf -- '/tmp/x; reboot'"

    def test_macos_uses_osascript(self) -> None:
        """macOS runs rm through an AppleScript admin prompt."""
        command = AdminShellRemover(platform="darwin").build_command(["/tmp/a"])

        assert command[0] == "/usr/bin/osascript"
        assert command[2] == 'do shell script "rm -rf -- /tmp/a" with administrator privileges'

    def test_macos_escapes_quotes(self) -> None:
        """Double quotes are escaped inside the AppleScript string."""
        command = AdminShellRemover(platform="darwin").build_command(['/tmp/say "hi"'])

        assert '\\"hi\\"' in command[2]


class TestRemove:
    """Tests for AdminShellRemover.remove."""

    @patch("reclaim.privilege.fallback.run_command")
    def test_exit_zero_is_success(self, mock_run: MagicMock) -> None:
        """Exit status 0 means success."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)

        assert AdminShellRemover(platform="linux").remove(["/tmp/a"]).is_success

    @pytest.mark.parametrize(
        "stderr",
        [
            "Error executing command as another user: Request dismissed",
            "execution error: User canceled. (-128)",
        ],
    )
    @patch("reclaim.privilege.fallback.run_command")
    def test_cancellation_markers(self, mock_run: MagicMock, stderr: str) -> None:
        """Dismissal markers yield Cancelled."""
        mock_run.return_value = CommandResult(stdout="", stderr=stderr, returncode=126)

        assert AdminShellRemover(platform="linux").remove(["/tmp/a"]).is_cancelled

    @patch("reclaim.privilege.fallback.run_command")
    def test_other_failure_carries_output(self, mock_run: MagicMock) -> None:
        """Other failures carry the captured output."""
        mock_run.return_value = CommandResult(
            stdout="", stderr="rm: cannot remove '/tmp/a': Device or resource busy\n", returncode=1
        )

        result = AdminShellRemover(platform="linux").remove(["/tmp/a"])

        assert result.is_failure
        assert result.message == "rm: cannot remove '/tmp/a': Device or resource busy"
        assert result.reason is FailureReason.CHANNEL

    @patch("reclaim.privilege.fallback.run_command")
    def test_silent_failure_has_generic_message(self, mock_run: MagicMock) -> None:
        """Failures without output get a generic message."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=1)

        result = AdminShellRemover(platform="linux").remove(["/tmp/a"])

        assert result.message == "Administrator command failed."

    @patch("reclaim.privilege.fallback.run_command")
    def test_missing_elevation_tool(self, mock_run: MagicMock) -> None:
        """A missing pkexec is an authorization failure."""
        mock_run.side_effect = FileNotFoundError("pkexec")

        result = AdminShellRemover(platform="linux").remove(["/tmp/a"])

        assert result.is_failure
        assert result.reason is FailureReason.AUTHORIZATION
        assert result.message.startswith("Unable to request administrator privileges:")
