"""Primary privilege channel: the out-of-process helper service.

The helper runs as root behind a Unix socket (see
reclaim.privilege.service). The client sends one removeItems request and
waits a bounded time for the reply. The reply, connection interruption,
invalidation and socket errors all race to resolve a single ResultCell;
the first one wins and the rest are discarded.
"""

from __future__ import annotations

import logging
import socket
import subprocess
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from reclaim.core.config import (
    DEFAULT_HELPER_SERVICE,
    DEFAULT_HELPER_SOCKET,
    DEFAULT_HELPER_TIMEOUT,
)
from reclaim.privilege.cell import ResultCell
from reclaim.privilege.models import FailureReason, PrivilegedResult
from reclaim.privilege.protocol import RemoveItemsReply, RemoveItemsRequest
from reclaim.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# Directories searched for an installed helper unit
SYSTEMD_UNIT_DIRS: tuple[str, ...] = (
    "/etc/systemd/system",
    "/usr/lib/systemd/system",
    "/lib/systemd/system",
)

# pkexec exit status when the authentication dialog is dismissed
PKEXEC_DISMISSED = 126

_SOCKET_APPEAR_TIMEOUT = 2.0

UNAVAILABLE_MESSAGE = "Privileged helper is unavailable."
INTERRUPTED_MESSAGE = "Privileged helper communication was interrupted."
INVALIDATED_MESSAGE = "Privileged helper connection was invalidated."
TIMEOUT_MESSAGE = "Timed out waiting for privileged helper response."
NO_RESPONSE_MESSAGE = "Privileged helper did not return a response."
DEFAULT_FAILURE_MESSAGE = "Privileged helper failed to delete the selected items."


class PrivilegedChannel(Protocol):
    """A way of removing paths with administrator rights."""

    def remove(self, paths: list[str]) -> PrivilegedResult: ...


class HelperConnection:
    """Bidirectional connection to the helper socket.

    Replies are read on a daemon thread. Callbacks therefore arrive on a
    thread other than the caller's.

    Args:
        socket_path: Helper socket to connect to.
        on_error: Called with a message on interruption, invalidation or
            socket failure.
    """

    def __init__(self, socket_path: str, on_error: Callable[[str], None]) -> None:
        self._socket_path = socket_path
        self._on_error = on_error
        self._sock: socket.socket | None = None
        self._invalidated = threading.Event()

    def open(self) -> None:
        """Connect to the helper.

        Raises:
            OSError: If the socket cannot be reached.
        """
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(self._socket_path)
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def remove_items(self, paths: list[str], reply: Callable[[bool, str | None], None]) -> None:
        """Dispatch a removeItems request.

        Args:
            paths: Absolute paths to remove.
            reply: Called with (success, message) when the helper answers.
        """
        if self._sock is None:
            self._on_error(UNAVAILABLE_MESSAGE)
            return

        try:
            self._sock.sendall(RemoveItemsRequest(paths=paths).encode())
        except OSError as e:
            self._on_error(f"Failed to send request to privileged helper: {e}")
            return

        reader = threading.Thread(
            target=self._read_reply,
            args=(self._sock, reply),
            name="reclaim-helper-reply",
            daemon=True,
        )
        reader.start()

    def invalidate(self) -> None:
        """Close the connection. Pending callbacks report invalidation."""
        self._invalidated.set()
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            logger.debug("Helper socket already disconnected")
        sock.close()

    def _read_reply(self, sock: socket.socket, reply: Callable[[bool, str | None], None]) -> None:
        try:
            with sock.makefile("rb") as stream:
                line = stream.readline()
        except (OSError, ValueError) as e:
            self._on_error(INVALIDATED_MESSAGE if self._invalidated.is_set() else str(e))
            return

        if not line:
            self._on_error(
                INVALIDATED_MESSAGE if self._invalidated.is_set() else INTERRUPTED_MESSAGE
            )
            return

        try:
            parsed = RemoveItemsReply.model_validate_json(line)
        except ValidationError as e:
            self._on_error(f"Malformed reply from privileged helper: {e.error_count()} error(s)")
            return

        reply(parsed.success, parsed.message)


class HelperChannel:
    """Removes paths through the privileged helper service.

    Args:
        socket_path: Helper socket path.
        service: systemd unit that provides the helper.
        timeout: Seconds to wait for a reply.
        unit_dirs: Directories searched for the installed unit.
    """

    def __init__(
        self,
        socket_path: str = DEFAULT_HELPER_SOCKET,
        service: str = DEFAULT_HELPER_SERVICE,
        timeout: float = DEFAULT_HELPER_TIMEOUT,
        unit_dirs: Sequence[str] = SYSTEMD_UNIT_DIRS,
    ) -> None:
        self._socket_path = socket_path
        self._service = service
        self._timeout = timeout
        self._unit_dirs = tuple(unit_dirs)

    def is_available(self) -> bool:
        """Check if the helper is running or installed.

        Returns:
            True if the socket exists or the service unit is installed.
        """
        if Path(self._socket_path).exists():
            return True
        return any((Path(d) / self._service).exists() for d in self._unit_dirs)

    def remove(self, paths: list[str]) -> PrivilegedResult:
        """Ask the helper to remove paths.

        Args:
            paths: Absolute paths to remove.

        Returns:
            SUCCESS, CANCELLED (authorization dismissed) or FAILURE.
        """
        if not self.is_available():
            logger.info("Privileged helper %s is not installed", self._service)
            return PrivilegedResult.failure(UNAVAILABLE_MESSAGE, FailureReason.UNAVAILABLE)

        started = self._start_helper_if_needed()
        if started is not None:
            return started

        cell: ResultCell[PrivilegedResult] = ResultCell()

        def on_error(message: str) -> None:
            if not cell.resolve(PrivilegedResult.failure(message, FailureReason.CHANNEL)):
                logger.debug("Discarding late helper error: %s", message)

        def on_reply(success: bool, message: str | None) -> None:
            result = (
                PrivilegedResult.success()
                if success
                else PrivilegedResult.failure(message or DEFAULT_FAILURE_MESSAGE)
            )
            if not cell.resolve(result):
                logger.debug("Discarding late helper reply")

        connection = HelperConnection(self._socket_path, on_error=on_error)
        try:
            connection.open()
        except OSError as e:
            logger.info("Cannot connect to privileged helper at %s: %s", self._socket_path, e)
            return PrivilegedResult.failure(UNAVAILABLE_MESSAGE, FailureReason.UNAVAILABLE)

        try:
            connection.remove_items(paths, reply=on_reply)
            result = cell.wait(self._timeout)
            if result is None:
                cell.resolve(PrivilegedResult.failure(TIMEOUT_MESSAGE, FailureReason.TIMEOUT))
                result = cell.value
        finally:
            connection.invalidate()

        return result or PrivilegedResult.failure(NO_RESPONSE_MESSAGE)

    def _start_helper_if_needed(self) -> PrivilegedResult | None:
        """Best-effort start of the helper service.

        Returns:
            A CANCELLED result if the user dismissed authorization, None
            otherwise (including when starting failed; the connection
            attempt decides the outcome).
        """
        if Path(self._socket_path).exists():
            return None
        if not (command_exists("pkexec") and command_exists("systemctl")):
            logger.debug("pkexec/systemctl unavailable, not starting helper")
            return None

        try:
            result = run_command(["pkexec", "systemctl", "start", self._service], timeout=120.0)
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Failed to start privileged helper: %s", e)
            return None

        if result.returncode == PKEXEC_DISMISSED:
            return PrivilegedResult.cancelled()
        if not result.success:
            logger.warning("Starting %s failed: %s", self._service, result.output)
            return None

        deadline = time.monotonic() + _SOCKET_APPEAR_TIMEOUT
        while not Path(self._socket_path).exists() and time.monotonic() < deadline:
            time.sleep(0.05)
        return None
