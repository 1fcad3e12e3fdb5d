"""Privileged helper service.

Runs as root (typically as a systemd unit) and listens on a Unix socket
for removeItems requests from the unprivileged client. Each request is a
single JSON line answered by a single JSON reply line.

The socket is created with mode 0660, so only root and members of the
socket's group can connect. When allowed user ids are given, the
peer's credentials are read with SO_PEERCRED and any other uid (root
excepted) is disconnected before its request is read.
"""

import logging
import os
import shutil
import socket
import socketserver
import struct
from collections.abc import Collection
from pathlib import Path

from pydantic import ValidationError

from reclaim.guard.path_guard import is_restricted, normalize_path
from reclaim.privilege.protocol import RemoveItemsReply, RemoveItemsRequest

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_MODE = 0o660

_PEERCRED_FORMAT = "3i"


def peer_uid(sock: socket.socket) -> int | None:
    """Read the user id of the process on the other end of a Unix socket.

    Returns:
        The peer uid, or None where SO_PEERCRED is not supported.
    """
    if not hasattr(socket, "SO_PEERCRED"):
        return None
    creds = sock.getsockopt(
        socket.SOL_SOCKET, socket.SO_PEERCRED, struct.calcsize(_PEERCRED_FORMAT)
    )
    _pid, uid, _gid = struct.unpack(_PEERCRED_FORMAT, creds)
    return uid


def remove_items(paths: list[str]) -> RemoveItemsReply:
    """Remove paths with the service's privileges.

    Relative, empty and root paths are refused. Paths that no longer
    exist count as removed.

    Args:
        paths: Absolute paths to remove.

    Returns:
        Reply describing the outcome.
    """
    failures: list[str] = []

    for raw in paths:
        if not raw.startswith("/"):
            failures.append(f"{raw or '<empty>'}: path must be absolute")
            continue

        path = normalize_path(raw)
        if is_restricted(path):
            failures.append(f"{raw}: refusing to remove restricted path")
            continue

        target = Path(path)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            failures.append(f"{path}: {e.strerror or e}")

    if failures:
        logger.warning("Failed to remove %d of %d path(s)", len(failures), len(paths))
        return RemoveItemsReply(
            success=False,
            message=f"Failed to remove {len(failures)} item(s): " + "; ".join(failures),
        )

    logger.info("Removed %d path(s)", len(paths))
    return RemoveItemsReply(success=True)


class RemoveItemsHandler(socketserver.StreamRequestHandler):
    """Handles a single request line on a client connection."""

    def handle(self) -> None:
        line = self.rfile.readline()
        if not line:
            return

        try:
            request = RemoveItemsRequest.model_validate_json(line)
        except ValidationError as e:
            logger.warning("Rejecting malformed request: %s", e)
            reply = RemoveItemsReply(
                success=False,
                message=f"Invalid request: {e.error_count()} error(s)",
            )
        else:
            reply = remove_items(request.paths)

        try:
            self.wfile.write(reply.encode())
        except OSError as e:
            logger.info("Client disconnected before reply: %s", e)


class HelperService(socketserver.ThreadingUnixStreamServer):
    """Threaded Unix socket server answering removeItems requests.

    A stale socket file left by a previous run is replaced.

    Args:
        socket_path: Path to bind.
        mode: Permission bits applied to the socket file.
        group: Group given access to the socket, if any.
        allowed_uids: User ids allowed to connect besides root. None
            leaves access control to the socket permissions.
    """

    daemon_threads = True

    def __init__(
        self,
        socket_path: str,
        mode: int = DEFAULT_SOCKET_MODE,
        group: str | None = None,
        allowed_uids: Collection[int] | None = None,
    ) -> None:
        self.socket_path = socket_path
        self.allowed_uids = frozenset(allowed_uids) if allowed_uids is not None else None
        existing = Path(socket_path)
        if existing.is_socket():
            existing.unlink()
        existing.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(socket_path, RemoveItemsHandler)
        try:
            os.chmod(socket_path, mode)
            if group is not None:
                shutil.chown(socket_path, group=group)
        except (OSError, LookupError):
            self.server_close()
            raise
        logger.info("Privileged helper listening on %s", socket_path)

    def verify_request(  # type: ignore[override]
        self, request: socket.socket, client_address: object
    ) -> bool:
        if self.allowed_uids is None:
            return True
        uid = peer_uid(request)
        if uid is None:
            logger.warning("Cannot read peer credentials; refusing connection")
            return False
        if uid == 0 or uid in self.allowed_uids:
            return True
        logger.warning("Refusing connection from uid %d", uid)
        return False

    def server_close(self) -> None:
        super().server_close()
        Path(self.socket_path).unlink(missing_ok=True)
