"""Clean command implementation.

Scans, selects every candidate of the chosen steps and removes them,
escalating to administrator rights only for paths that need it.
"""

import asyncio
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from reclaim.cleanup.models import CleanupStep, DryRunPreview, RunSummary
from reclaim.cleanup.orchestrator import OrchestratorState
from reclaim.cli.prompts import TerminalConfirmer
from reclaim.cli.types import StepChoice, build_orchestrator, get_steps, require_config
from reclaim.core.config import ReclaimConfig
from reclaim.core.diagnostics import Diagnostics
from reclaim.privilege.confirm import Confirmer, MainThreadConfirmer, StaticConfirmer
from reclaim.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Remove reclaimable files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clean_command(
    step: Annotated[
        StepChoice,
        typer.Option(
            "--step",
            "-s",
            help="Cleanup step to run.",
            case_sensitive=False,
        ),
    ] = StepChoice.ALL,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be removed."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompts."),
    ] = False,
) -> None:
    """Remove caches, logs, large files and build artifacts."""
    config = require_config()
    summary = asyncio.run(_clean(config, get_steps(step), dry_run=dry_run, yes=yes))

    if summary is None:
        return

    _print_summary(summary)
    if not summary.success:
        raise typer.Exit(code=1)


async def _clean(
    config: ReclaimConfig,
    steps: set[CleanupStep],
    *,
    dry_run: bool,
    yes: bool,
) -> RunSummary | None:
    """Scan, confirm and run the cleanup on the event loop."""
    inner: Confirmer = StaticConfirmer(True) if yes else TerminalConfirmer()
    confirmer = MainThreadConfirmer(inner, asyncio.get_running_loop())
    orchestrator = build_orchestrator(config, confirmer, steps, Diagnostics())

    with err_console.status("Scanning..."):
        await orchestrator.scan()

    orchestrator.select_all(True)
    preview = orchestrator.preview()
    if preview.selected_count == 0:
        print_info("Nothing to clean.")
        return None

    _print_plan(preview, dry_run)

    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nProceed with removing {preview.selected_count} item(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    with Progress(
        TextColumn("[info]{task.description}[/]"),
        BarColumn(),
        TaskProgressColumn(),
        console=err_console,
        transient=True,
    ) as progress:
        task = progress.add_task("Dry run" if dry_run else "Cleaning", total=1.0)

        def on_state(state: OrchestratorState) -> None:
            progress.update(task, completed=state.overall_progress)

        unsubscribe = orchestrator.subscribe(on_state)
        try:
            return await orchestrator.run(dry_run=dry_run)
        finally:
            unsubscribe()


def _print_plan(preview: DryRunPreview, dry_run: bool) -> None:
    """Display the selected items per category."""
    label = "Planned Cleanup (dry-run)" if dry_run else "Planned Cleanup"
    table = Table(title=label, header_style="bold_header", border_style="border")
    table.add_column("Category", style="bold")
    table.add_column("Selected", justify="right")
    table.add_column("Size", style="info", justify="right")

    for category in preview.categories:
        if category.selected_count == 0:
            continue
        table.add_row(
            category.title,
            f"{category.selected_count}/{category.total_count}",
            format_size(category.selected_size),
        )

    console.print(table)


def _print_summary(summary: RunSummary) -> None:
    """Display the run summary."""
    if summary.success:
        print_success(summary.headline)
    else:
        print_error(summary.headline)

    for line in summary.details:
        console.print(f"  [text]{line}[/]")

    if summary.recovery:
        console.print(f"\n[warning]{summary.recovery}[/]")
