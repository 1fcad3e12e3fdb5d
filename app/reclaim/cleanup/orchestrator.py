"""Cleanup orchestration.

The orchestrator drives the registered executors through a scan phase
and a run phase, reconciles selections across rescans, aggregates
weighted progress and assembles the run summary.

All state lives in an immutable OrchestratorState snapshot that is only
replaced on the event loop thread. Executors run in worker threads and
their progress callbacks are marshalled back onto the loop before they
touch state.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from reclaim.cleanup.base import CleanupExecutor
from reclaim.cleanup.models import (
    CleanupCategory,
    CleanupItem,
    CleanupOutcome,
    CleanupStep,
    DryRunPreview,
    PreviewCategory,
    RunSummary,
    StepState,
)
from reclaim.cleanup.progress import ProgressTracker, clamp
from reclaim.core.diagnostics import (
    DiagnosticsCategory,
    DiagnosticsSeverity,
    DiagnosticsSink,
    emit,
)
from reclaim.guard.path_guard import PathGuard
from reclaim.guard.safe_roots import SafePathFilter

logger = logging.getLogger(__name__)

SUCCESS_HEADLINE = "Cleanup completed successfully."
FAILURE_HEADLINE = "Cleanup completed with issues."
DRY_RUN_SUCCESS_HEADLINE = "Dry run completed."
DRY_RUN_FAILURE_HEADLINE = "Dry run completed with issues."
UNEXPECTED_FAILURE = "Cleanup step failed unexpectedly."


@dataclass(frozen=True, slots=True)
class OrchestratorState:
    """Snapshot of everything a front end shows.

    Attributes:
        categories: Scanned categories in step order.
        step_states: Run state per step.
        step_progress: Completion fraction per active step.
        is_scanning: A scan is in progress.
        is_running: A run is in progress.
        overall_progress: Weighted completion of the current run.
        run_summary: Summary of the last run, if kept.
    """

    categories: tuple[CleanupCategory, ...] = ()
    step_states: dict[CleanupStep, StepState] = field(default_factory=dict)
    step_progress: dict[CleanupStep, float] = field(default_factory=dict)
    is_scanning: bool = False
    is_running: bool = False
    overall_progress: float = 0.0
    run_summary: RunSummary | None = None

    def category(self, step: CleanupStep) -> CleanupCategory | None:
        """Find the category for a step."""
        return next((c for c in self.categories if c.step is step), None)


StateListener = Callable[[OrchestratorState], None]


def unique(values: Iterable[str]) -> list[str]:
    """De-duplicate strings, keeping first occurrences in order."""
    return list(dict.fromkeys(values))


class CleanupOrchestrator:
    """Runs cleanup executors and tracks their state.

    Scan and run requests made while either is in progress are ignored.
    Categories within a run are processed strictly one after another.

    Args:
        executors: One executor per cleanup step.
        guard: Deletion guard used for the scan-time safety check.
        safe_filter: Safe-root allow-list; built from guard if omitted.
        diagnostics: Optional event sink.
    """

    def __init__(
        self,
        executors: Iterable[CleanupExecutor],
        guard: PathGuard,
        *,
        safe_filter: SafePathFilter | None = None,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        ordered = sorted(executors, key=lambda executor: executor.step.order)
        self._executors: dict[CleanupStep, CleanupExecutor] = {e.step: e for e in ordered}
        self._guard = guard
        self._safe_filter = safe_filter or SafePathFilter(guard)
        self._diagnostics = diagnostics
        self._state = OrchestratorState(
            step_states={step: StepState.pending() for step in self._executors}
        )
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> OrchestratorState:
        """Current state snapshot."""
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new snapshot.

        Args:
            listener: Called on the event loop thread after each change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def scan(self, preserving_summary: bool = False) -> None:
        """Rescan every executor and reconcile selections.

        Args:
            preserving_summary: Keep the last run summary.
        """
        if self._state.is_scanning or self._state.is_running:
            logger.debug("Scan requested while busy; ignoring")
            return

        previous = self._state.categories
        selections = {(c.step, item.path): item.selected for c in previous for item in c.items}
        enabled = {c.step: c.enabled for c in previous}

        self._update(
            is_scanning=True,
            run_summary=self._state.run_summary if preserving_summary else None,
            step_states={step: StepState.pending() for step in self._executors},
            step_progress={},
            overall_progress=0.0,
        )

        try:
            scanned = await asyncio.gather(
                *(self._scan_executor(executor) for executor in self._executors.values())
            )
            categories = sorted(
                (self._reconcile(category, selections, enabled) for category in scanned),
                key=lambda category: category.step.order,
            )
            self._update(categories=tuple(categories))
        finally:
            self._update(is_scanning=False)

        self._record(
            DiagnosticsSeverity.INFO,
            "Cleanup scan completed.",
            categories=str(len(categories)),
            items=str(sum(category.total_count for category in categories)),
        )

    async def _scan_executor(self, executor: CleanupExecutor) -> CleanupCategory:
        try:
            return await asyncio.to_thread(executor.scan)
        except Exception as e:
            logger.exception("Scan failed for %s", executor.step.value)
            return CleanupCategory(step=executor.step, error=f"Scan failed: {e}")

    def _reconcile(
        self,
        category: CleanupCategory,
        selections: dict[tuple[CleanupStep, str], bool],
        enabled: dict[CleanupStep, bool | None],
    ) -> CleanupCategory:
        kept: list[CleanupItem] = []
        for item in category.items:
            if not self._safe_filter.permits(item.path):
                logger.debug("Dropping %s outside safe roots", item.path)
                continue
            kept.append(
                dataclasses.replace(
                    item,
                    guard_decision=self._guard.decision(item.path),
                    selected=selections.get((category.step, item.path), item.selected),
                )
            )

        return CleanupCategory(
            step=category.step,
            items=tuple(kept),
            enabled=enabled.get(category.step),
            error=category.error,
            note=category.note,
        )

    async def run(self, dry_run: bool = False) -> RunSummary | None:
        """Execute every category with a selection.

        Args:
            dry_run: Count what would be removed without removing.

        Returns:
            The run summary, or None if nothing was selected or the
            orchestrator was busy.
        """
        if self._state.is_scanning or self._state.is_running:
            logger.debug("Run requested while busy; ignoring")
            return None

        active = [category for category in self._state.categories if category.has_selection]
        if not active:
            return None

        weights = {category.step: max(category.selected_count, 1) for category in active}
        total_weight = sum(weights.values())
        loop = asyncio.get_running_loop()

        self._update(
            is_running=True,
            run_summary=None,
            overall_progress=0.0,
            step_progress={category.step: 0.0 for category in active},
            step_states={step: StepState.pending() for step in self._executors},
        )

        details: list[str] = []
        recoveries: list[str] = []
        success = True
        summary: RunSummary | None = None

        try:
            self._record_run_start(active, dry_run)
            for category in active:
                self._set_step_state(category.step, StepState.running())

                def progress_update(fraction: float, step: CleanupStep = category.step) -> None:
                    loop.call_soon_threadsafe(
                        self._record_progress, step, fraction, weights, total_weight
                    )

                outcome = await self._execute_category(category, dry_run, progress_update)
                self._record_progress(category.step, 1.0, weights, total_weight)
                self._set_step_state(category.step, StepState.from_outcome(outcome))

                details.append(f"{category.title}: {outcome.message}")
                if outcome.recovery_suggestion:
                    recoveries.append(outcome.recovery_suggestion)
                success = success and outcome.success
                self._record_completion(category, outcome)

            if dry_run:
                headline = DRY_RUN_SUCCESS_HEADLINE if success else DRY_RUN_FAILURE_HEADLINE
            else:
                headline = SUCCESS_HEADLINE if success else FAILURE_HEADLINE

            recovery = " ".join(unique(r for r in recoveries if r.strip()))
            summary = RunSummary(
                success=success,
                headline=headline,
                details=tuple(details),
                recovery=recovery or None,
                dry_run=dry_run,
            )
        finally:
            self._update(is_running=False, run_summary=summary)

        if success and not dry_run:
            await self.scan(preserving_summary=True)

        return summary

    async def _execute_category(
        self,
        category: CleanupCategory,
        dry_run: bool,
        progress_update: Callable[[float], None],
    ) -> CleanupOutcome:
        executor = self._executors[category.step]
        items = category.selected_items
        tracker = ProgressTracker(len(items))
        try:
            return await asyncio.to_thread(
                executor.execute, items, dry_run, tracker, progress_update
            )
        except Exception as e:
            logger.exception("Executor for %s raised", category.step.value)
            return CleanupOutcome.failed(UNEXPECTED_FAILURE, str(e) or type(e).__name__)

    def _record_progress(
        self,
        step: CleanupStep,
        fraction: float,
        weights: dict[CleanupStep, int],
        total_weight: int,
    ) -> None:
        progress = dict(self._state.step_progress)
        progress[step] = max(progress.get(step, 0.0), clamp(fraction))
        overall = sum(progress.get(s, 0.0) * weight for s, weight in weights.items())
        self._update(
            step_progress=progress,
            overall_progress=max(self._state.overall_progress, clamp(overall / total_weight)),
        )

    def set_item_selected(self, step: CleanupStep, path: str, selected: bool) -> None:
        """Select or deselect one item.

        Args:
            step: Category of the item.
            path: Item path (compared after normalization).
            selected: New selection flag.
        """
        wanted = CleanupItem(path=path, name="").path
        self._replace_categories(
            lambda category: category
            if category.step is not step
            else dataclasses.replace(
                category,
                items=tuple(
                    dataclasses.replace(item, selected=selected)
                    if item.path == wanted
                    else item
                    for item in category.items
                ),
            )
        )

    def set_category_enabled(self, step: CleanupStep, enabled: bool) -> None:
        """Enable or disable a category for the next run."""
        self._replace_categories(
            lambda category: dataclasses.replace(category, enabled=enabled)
            if category.step is step
            else category
        )

    def select_all(self, enabled: bool) -> None:
        """Toggle every non-empty category and all of its items at once."""
        self._replace_categories(
            lambda category: dataclasses.replace(
                category,
                enabled=enabled,
                items=tuple(dataclasses.replace(item, selected=enabled) for item in category.items),
            )
        )

    def preview(self) -> DryRunPreview:
        """Snapshot the current selection."""
        return DryRunPreview(
            categories=tuple(
                PreviewCategory(
                    step=category.step,
                    title=category.title,
                    total_count=category.total_count,
                    selected_count=category.selected_count,
                    selected_size=category.selected_size,
                    items=tuple(category.selected_items),
                )
                for category in self._state.categories
            )
        )

    def _replace_categories(self, transform: Callable[[CleanupCategory], CleanupCategory]) -> None:
        if self._state.is_running:
            logger.debug("Selection change ignored during run")
            return
        self._update(categories=tuple(transform(c) for c in self._state.categories))

    def _set_step_state(self, step: CleanupStep, state: StepState) -> None:
        states = dict(self._state.step_states)
        states[step] = state
        self._update(step_states=states)

    def _update(self, **changes: object) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed")

    def _record_run_start(self, active: list[CleanupCategory], dry_run: bool) -> None:
        self._record(
            DiagnosticsSeverity.INFO,
            "User initiated cleanup run.",
            steps=", ".join(category.title for category in active),
            selectedItems=str(sum(category.selected_count for category in active)),
            dryRun=str(dry_run).lower(),
        )
        for category in active:
            for item in category.selected_items:
                self._record(
                    DiagnosticsSeverity.INFO,
                    "Queued cleanup item.",
                    step=category.step.value,
                    path=item.path,
                    decision=item.guard_decision.value,
                    size=str(item.size) if item.size is not None else "unknown",
                )

    def _record_completion(self, category: CleanupCategory, outcome: CleanupOutcome) -> None:
        items = category.selected_items
        decisions: dict[str, int] = {}
        for item in items:
            decisions[item.guard_decision.value] = decisions.get(item.guard_decision.value, 0) + 1
        self._record(
            DiagnosticsSeverity.INFO if outcome.success else DiagnosticsSeverity.WARNING,
            f"Cleanup step completed: {category.title}",
            step=category.step.value,
            success=str(outcome.success).lower(),
            outcome=outcome.message,
            recovery=outcome.recovery_suggestion or "",
            decisions=", ".join(f"{key}={value}" for key, value in sorted(decisions.items())),
            sizeBytes=str(sum(item.size or 0 for item in items)),
        )

    def _record(self, severity: DiagnosticsSeverity, message: str, **metadata: str) -> None:
        emit(self._diagnostics, DiagnosticsCategory.CLEANUP, severity, message, **metadata)
