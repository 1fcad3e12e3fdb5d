"""Interactive confirmation for administrator escalation."""

import typer

from reclaim.privilege.confirm import ConfirmationRequest
from reclaim.utils.formatting import err_console


class TerminalConfirmer:
    """Asks for administrator approval on the terminal."""

    def confirm(self, request: ConfirmationRequest) -> bool:
        err_console.print(f"\n[warning]{request.title}[/]")
        err_console.print(f"[text]{request.message}[/]")
        return typer.confirm("Continue with administrator privileges?", default=False)
