"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from reclaim.core.theme import get_theme

if TYPE_CHECKING:
    from reclaim.cleanup.models import CleanupItem
    from reclaim.guard.models import GuardDecision


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None:
        return "-"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def format_decision(decision: GuardDecision) -> str:
    """Format a guard decision with its theme color."""
    return f"[decision.{decision.value}]{decision.display_name}[/]"


def create_item_table(title: str) -> Table:
    """Create a pre-configured table for cleanup items.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for item display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Name", style="text", overflow="ellipsis")
    table.add_column("Path", style="muted", overflow="fold")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Guard", no_wrap=True)
    return table


def format_item_row(item: CleanupItem) -> tuple[str, str, str, str, str]:
    """Format a cleanup item as a table row.

    Args:
        item: Item to format.

    Returns:
        Tuple of (selection icon, name, path, size, decision) with Rich markup.
    """
    icon = "[success]●[/]" if item.selected else "[muted]○[/]"
    return (
        icon,
        item.name,
        item.path,
        format_size(item.size),
        format_decision(item.guard_decision),
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
