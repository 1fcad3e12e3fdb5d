"""Privileged helper commands."""

import os
from typing import Annotated

import typer

from reclaim.cli.types import require_config
from reclaim.privilege.service import HelperService
from reclaim.utils.formatting import print_error, print_info, print_warning

app = typer.Typer(
    help="Privileged helper service.",
    no_args_is_help=True,
)


@app.command("serve")
def serve(
    socket_path: Annotated[
        str | None,
        typer.Option(
            "--socket",
            "-s",
            help="Socket to listen on (defaults to the configured helper socket).",
        ),
    ] = None,
    group: Annotated[
        str | None,
        typer.Option("--group", "-g", help="Group allowed to connect to the socket."),
    ] = None,
    allow_uid: Annotated[
        list[int] | None,
        typer.Option(
            "--allow-uid",
            help="User id allowed to connect besides root (repeatable).",
        ),
    ] = None,
) -> None:
    """Run the privileged helper until interrupted.

    The socket is only accessible to root and the socket group. With
    --allow-uid, connections from any other user id are refused.
    """
    path = socket_path or require_config().helper_socket

    if os.geteuid() != 0:
        print_warning("Not running as root; removals are limited to your own permissions.")

    try:
        server = HelperService(
            path, group=group, allowed_uids=list(allow_uid) if allow_uid else None
        )
    except (OSError, LookupError) as e:
        print_error(f"Cannot listen on {path}: {e}")
        raise typer.Exit(code=1) from e

    print_info(f"Privileged helper listening on {path}")
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print_info("Stopped.")
