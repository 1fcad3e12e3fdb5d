"""Scan command implementation.

Lists cleanup candidates per category with their guard decision.
"""

import asyncio
import json
from enum import Enum
from typing import Annotated, Any

import typer

from reclaim.cleanup.models import CleanupCategory
from reclaim.cli.types import StepChoice, build_orchestrator, get_steps, require_config
from reclaim.privilege.confirm import StaticConfirmer
from reclaim.utils.formatting import (
    console,
    create_item_table,
    err_console,
    format_item_row,
    format_size,
    print_info,
    print_warning,
)

app = typer.Typer(
    help="Scan for reclaimable files.",
    invoke_without_command=True,
)


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@app.callback(invoke_without_command=True)
def scan_command(
    step: Annotated[
        StepChoice,
        typer.Option(
            "--step",
            "-s",
            help="Cleanup step to scan.",
            case_sensitive=False,
        ),
    ] = StepChoice.ALL,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan for caches, logs, large files and build artifacts."""
    config = require_config()
    # Scans never escalate
    orchestrator = build_orchestrator(config, StaticConfirmer(False), get_steps(step))

    with err_console.status("Scanning..."):
        asyncio.run(orchestrator.scan())

    categories = orchestrator.state.categories

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([_category_to_dict(c) for c in categories]))
        return

    if not any(category.items for category in categories):
        for category in categories:
            if category.error:
                print_warning(f"{category.title}: {category.error}")
        print_info("Nothing to reclaim.")
        return

    total_size = 0
    total_items = 0
    for category in categories:
        _print_category(category)
        total_size += category.total_size or 0
        total_items += category.total_count

    console.print(
        f"\n[dim]Found {total_items} item(s) in {len(categories)} "
        f"categor{'y' if len(categories) == 1 else 'ies'} ({format_size(total_size)} total)[/dim]"
    )


def _print_category(category: CleanupCategory) -> None:
    """Display one category as a Rich table."""
    if category.error:
        print_warning(f"{category.title}: {category.error}")
    if not category.items:
        console.print(f"[muted]{category.title}: nothing found[/]")
        return

    table = create_item_table(f"{category.title} ({format_size(category.total_size)})")
    for item in category.items:
        table.add_row(*format_item_row(item))
    console.print(table)
    if category.note:
        console.print(f"[dim]{category.note}[/dim]")


def _category_to_dict(category: CleanupCategory) -> dict[str, Any]:
    """Serialize a category for JSON output."""
    return {
        "step": category.step.value,
        "title": category.title,
        "enabled": category.enabled,
        "error": category.error,
        "note": category.note,
        "total_size": category.total_size,
        "items": [
            {
                "path": item.path,
                "name": item.name,
                "size": item.size,
                "detail": item.detail,
                "selected": item.selected,
                "guard_decision": item.guard_decision.value,
                "reasons": [reason.code for reason in item.reasons],
            }
            for item in category.items
        ],
    }
