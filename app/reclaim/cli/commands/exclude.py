"""Exclusion list commands.

Paths on the exclusion list are never removed by any cleanup step.
"""

from typing import Annotated

import typer

from reclaim.core.diagnostics import (
    Diagnostics,
    DiagnosticsCategory,
    DiagnosticsSeverity,
    emit,
)
from reclaim.guard.path_guard import is_restricted, normalize_path
from reclaim.preferences.store import TomlExclusionStore
from reclaim.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage paths protected from cleanup.",
    no_args_is_help=True,
)


def _normalized_or_exit(path: str) -> str:
    normalized = normalize_path(path)
    if is_restricted(normalized):
        print_error(f"Not a valid exclusion: '{path}'")
        raise typer.Exit(code=1)
    return normalized


@app.command("add")
def add(
    path: Annotated[str, typer.Argument(help="Path to protect from cleanup.")],
) -> None:
    """Protect a path from cleanup."""
    normalized = _normalized_or_exit(path)
    store = TomlExclusionStore()

    if store.is_excluded(normalized):
        print_info(f"Already excluded: {normalized}")
        return

    store.update_exclusion(normalized, True)
    emit(
        Diagnostics(),
        DiagnosticsCategory.PREFERENCES,
        DiagnosticsSeverity.INFO,
        "Exclusion added.",
        path=normalized,
    )
    print_success(f"Excluded {normalized}")


@app.command("remove")
def remove(
    path: Annotated[str, typer.Argument(help="Path to release.")],
) -> None:
    """Release a protected path."""
    normalized = _normalized_or_exit(path)
    store = TomlExclusionStore()

    if not store.is_excluded(normalized):
        print_error(f"Not excluded: {normalized}")
        raise typer.Exit(code=1)

    store.update_exclusion(normalized, False)
    emit(
        Diagnostics(),
        DiagnosticsCategory.PREFERENCES,
        DiagnosticsSeverity.INFO,
        "Exclusion removed.",
        path=normalized,
    )
    print_success(f"Removed exclusion for {normalized}")


@app.command("list")
def list_exclusions() -> None:
    """Show protected paths."""
    paths = sorted(TomlExclusionStore().excluded_paths())
    if not paths:
        print_info("No excluded paths.")
        return

    for path in paths:
        console.print(path, markup=False, highlight=False)
