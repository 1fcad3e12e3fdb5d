"""Unit tests for helper commands."""

from unittest.mock import MagicMock, patch

from reclaim.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@patch("reclaim.cli.commands.helper.os.geteuid", return_value=0)
@patch("reclaim.cli.commands.helper.HelperService")
class TestHelperServe:
    """Tests for reclaim helper serve."""

    def test_serves_until_interrupted(self, mock_service: MagicMock, mock_euid: MagicMock) -> None:
        """Ctrl-C stops the service cleanly."""
        mock_service.return_value.serve_forever.side_effect = KeyboardInterrupt

        result = runner.invoke(app, ["helper", "serve", "--socket", "/tmp/h.sock"])

        assert result.exit_code == 0
        mock_service.assert_called_once_with("/tmp/h.sock", group=None, allowed_uids=None)
        assert "Stopped." in result.output

    def test_default_socket_from_config(
        self, mock_service: MagicMock, mock_euid: MagicMock
    ) -> None:
        """Without --socket the configured socket is used."""
        mock_service.return_value.serve_forever.side_effect = KeyboardInterrupt

        runner.invoke(app, ["helper", "serve"])

        mock_service.assert_called_once_with(
            "/run/reclaim-helper.sock", group=None, allowed_uids=None
        )

    def test_access_options(self, mock_service: MagicMock, mock_euid: MagicMock) -> None:
        """Socket group and allowed user ids are passed to the service."""
        mock_service.return_value.serve_forever.side_effect = KeyboardInterrupt

        result = runner.invoke(
            app,
            [
                "helper",
                "serve",
                "-s",
                "/tmp/h.sock",
                "--group",
                "reclaim",
                "--allow-uid",
                "1000",
                "--allow-uid",
                "1001",
            ],
        )

        assert result.exit_code == 0
        mock_service.assert_called_once_with(
            "/tmp/h.sock", group="reclaim", allowed_uids=[1000, 1001]
        )

    def test_unknown_group(self, mock_service: MagicMock, mock_euid: MagicMock) -> None:
        """An unknown socket group exits with code 1."""
        mock_service.side_effect = LookupError("no such group: nobody-here")

        result = runner.invoke(app, ["helper", "serve", "-s", "/tmp/h.sock", "-g", "nobody-here"])

        assert result.exit_code == 1
        assert "no such group" in result.output

    def test_bind_failure(self, mock_service: MagicMock, mock_euid: MagicMock) -> None:
        """Socket errors exit with code 1."""
        mock_service.side_effect = OSError("Address already in use")

        result = runner.invoke(app, ["helper", "serve", "-s", "/tmp/h.sock"])

        assert result.exit_code == 1
        assert "Cannot listen on /tmp/h.sock" in result.output

    def test_warns_when_not_root(self, mock_service: MagicMock, mock_euid: MagicMock) -> None:
        """Running unprivileged prints a warning."""
        mock_euid.return_value = 1000
        mock_service.return_value.serve_forever.side_effect = KeyboardInterrupt

        result = runner.invoke(app, ["helper", "serve", "-s", "/tmp/h.sock"])

        assert "Not running as root" in result.output
