"""Unit tests for the privileged helper client.

Most tests talk to a real HelperService or a raw listening socket on a
short temporary path (Unix socket paths are length-limited).
"""

import shutil
import socket
import tempfile
import threading
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from reclaim.privilege.helper import HelperChannel
from reclaim.privilege.models import FailureReason
from reclaim.privilege.service import HelperService
from reclaim.utils.shell import CommandResult


@pytest.fixture
def socket_path() -> Iterator[str]:
    """Short socket path in a private temporary directory."""
    directory = tempfile.mkdtemp(prefix="rc-", dir="/tmp")
    yield f"{directory}/h.sock"
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def helper_server(socket_path: str) -> Iterator[HelperService]:
    """Running helper service."""
    server = HelperService(socket_path)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def listener(socket_path: str) -> Iterator[socket.socket]:
    """Raw listening socket that never replies by itself."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.bind(socket_path)
    sock.listen(1)
    yield sock
    sock.close()


class TestAvailability:
    """Tests for HelperChannel.is_available."""

    def test_unavailable_without_socket_or_unit(self, tmp_path: Path) -> None:
        """No socket and no unit means unavailable."""
        channel = HelperChannel(socket_path=str(tmp_path / "none.sock"), unit_dirs=())

        assert not channel.is_available()

        result = channel.remove(["/tmp/a"])
        assert result.is_failure
        assert result.reason is FailureReason.UNAVAILABLE
        assert result.message == "Privileged helper is unavailable."

    def test_installed_unit_counts(self, tmp_path: Path) -> None:
        """An installed unit file makes the helper available."""
        (tmp_path / "reclaim-helper.service").write_text("[Service]\n")
        channel = HelperChannel(socket_path=str(tmp_path / "none.sock"), unit_dirs=[str(tmp_path)])

        assert channel.is_available()


class TestRemoveThroughService:
    """Tests against a running HelperService."""

    def test_removes_paths(
        self, helper_server: HelperService, socket_path: str, tmp_path: Path
    ) -> None:
        """A successful reply resolves Success."""
        target = tmp_path / "stale"
        target.mkdir()
        (target / "data.bin").write_bytes(b"x" * 10)
        channel = HelperChannel(socket_path=socket_path, timeout=5, unit_dirs=())

        result = channel.remove([str(target)])

        assert result.is_success
        assert not target.exists()

    def test_service_failure_is_reported(
        self, helper_server: HelperService, socket_path: str
    ) -> None:
        """A failed reply carries the service message."""
        channel = HelperChannel(socket_path=socket_path, timeout=5, unit_dirs=())

        result = channel.remove(["/"])

        assert result.is_failure
        assert result.reason is FailureReason.CHANNEL
        assert "refusing to remove restricted path" in (result.message or "")


class TestRaces:
    """Tests for timeout, interruption and malformed replies."""

    def test_timeout(self, listener: socket.socket, socket_path: str) -> None:
        """A silent helper resolves a timeout failure."""
        channel = HelperChannel(socket_path=socket_path, timeout=0.2, unit_dirs=())

        result = channel.remove(["/tmp/a"])

        assert result.is_failure
        assert result.reason is FailureReason.TIMEOUT
        assert result.message == "Timed out waiting for privileged helper response."

    def test_interrupted_connection(self, listener: socket.socket, socket_path: str) -> None:
        """A connection closed without reply resolves an interruption."""

        def close_after_request() -> None:
            conn, _ = listener.accept()
            conn.recv(65536)
            conn.close()

        threading.Thread(target=close_after_request, daemon=True).start()
        channel = HelperChannel(socket_path=socket_path, timeout=5, unit_dirs=())

        result = channel.remove(["/tmp/a"])

        assert result.is_failure
        assert result.message == "Privileged helper communication was interrupted."

    def test_malformed_reply(self, listener: socket.socket, socket_path: str) -> None:
        """Garbage replies resolve a failure."""

        def reply_garbage() -> None:
            conn, _ = listener.accept()
            conn.recv(65536)
            conn.sendall(b"not json\n")
            conn.close()

        threading.Thread(target=reply_garbage, daemon=True).start()
        channel = HelperChannel(socket_path=socket_path, timeout=5, unit_dirs=())

        result = channel.remove(["/tmp/a"])

        assert result.is_failure
        assert (result.message or "").startswith("Malformed reply from privileged helper")


class TestStartHelper:
    """Tests for starting an installed but stopped helper."""

    @pytest.fixture
    def installed(self, tmp_path: Path) -> HelperChannel:
        """Channel whose unit is installed but whose socket is absent."""
        (tmp_path / "reclaim-helper.service").write_text("[Service]\n")
        return HelperChannel(
            socket_path=str(tmp_path / "absent.sock"),
            timeout=1,
            unit_dirs=[str(tmp_path)],
        )

    @patch("reclaim.privilege.helper.run_command")
    @patch("reclaim.privilege.helper.command_exists", return_value=True)
    def test_dismissed_authorization_is_cancelled(
        self, mock_exists: MagicMock, mock_run: MagicMock, installed: HelperChannel
    ) -> None:
        """pkexec exit 126 means the user dismissed the prompt."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=126)

        result = installed.remove(["/tmp/a"])

        assert result.is_cancelled
        assert mock_run.call_args.args[0] == [
            "pkexec",
            "systemctl",
            "start",
            "reclaim-helper.service",
        ]

    @patch("reclaim.privilege.helper._SOCKET_APPEAR_TIMEOUT", 0.0)
    @patch("reclaim.privilege.helper.run_command")
    @patch("reclaim.privilege.helper.command_exists", return_value=True)
    def test_start_without_socket_is_unavailable(
        self, mock_exists: MagicMock, mock_run: MagicMock, installed: HelperChannel
    ) -> None:
        """A started unit that never listens is unavailable."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)

        result = installed.remove(["/tmp/a"])

        assert result.is_failure
        assert result.reason is FailureReason.UNAVAILABLE

    @patch("reclaim.privilege.helper.run_command")
    @patch("reclaim.privilege.helper.command_exists", return_value=False)
    def test_no_pkexec_skips_start(
        self, mock_exists: MagicMock, mock_run: MagicMock, installed: HelperChannel
    ) -> None:
        """Without pkexec the start step is skipped."""
        result = installed.remove(["/tmp/a"])

        mock_run.assert_not_called()
        assert result.reason is FailureReason.UNAVAILABLE
