"""Abstract base class for cleanup executors.

This module defines the executor interface the orchestrator drives and
a guarded removal base class implementing the shared execute algorithm.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reclaim.cleanup.models import CleanupCategory, CleanupItem, CleanupOutcome, CleanupStep
from reclaim.cleanup.progress import ProgressCallback, ProgressTracker
from reclaim.core.diagnostics import (
    DiagnosticsCategory,
    DiagnosticsSeverity,
    DiagnosticsSink,
    emit,
)
from reclaim.guard.models import GuardDecision, RestrictedPathError

if TYPE_CHECKING:
    from reclaim.guard.path_guard import PathGuard
    from reclaim.privilege.escalator import PrivilegeEscalator

logger = logging.getLogger(__name__)

# errno values meaning the user lacks rights to modify the path
PRIVILEGE_ERRNOS = frozenset({errno.EPERM, errno.EACCES, errno.EROFS})

EXCLUSION_RECOVERY = "Adjust your exclusion list and retry."
CANCELLED_RECOVERY = (
    "Re-run the cleanup and approve the administrator prompt to remove protected items."
)
ACCESS_RECOVERY = "Check that you have permission to modify the selected locations."
SKIPPED_RECOVERY = "Protected selections were skipped due to exclusions."
SYSTEM_PROTECTED_RECOVERY = (
    "Some paths are protected by the operating system and can't be removed automatically."
)


def requires_administrator_privileges(error: OSError) -> bool:
    """Check if a removal error means elevation is needed.

    Args:
        error: Error raised while removing a path.

    Returns:
        True for permission and read-only filesystem errors.
    """
    return isinstance(error, PermissionError) or error.errno in PRIVILEGE_ERRNOS


def remove_path(path: str) -> None:
    """Remove a file, symlink or directory tree.

    Raises:
        OSError: If removal fails.
    """
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


class CleanupExecutor(ABC):
    """Abstract base class for all cleanup executors.

    An executor owns one cleanup step: it discovers candidates and
    removes the ones the user selected.
    """

    @property
    @abstractmethod
    def step(self) -> CleanupStep:
        """Return the step this executor handles."""

    @abstractmethod
    def scan(self) -> CleanupCategory:
        """Discover removal candidates.

        Returns:
            Category holding the discovered items.
        """

    @abstractmethod
    def execute(
        self,
        items: Sequence[CleanupItem],
        dry_run: bool,
        tracker: ProgressTracker,
        progress_update: ProgressCallback,
    ) -> CleanupOutcome:
        """Remove selected items.

        Must not raise: every failure is reported through the outcome.

        Args:
            items: Selected items of this executor's category.
            dry_run: If True, count what would be removed without removing.
            tracker: Progress counter seeded with len(items).
            progress_update: Receives completion fractions.

        Returns:
            Outcome of the step.
        """


@dataclass(slots=True)
class RemovalReport:
    """Counters accumulated while executing one step."""

    removed: int = 0
    skipped: int = 0
    failures: list[str] = field(default_factory=list)
    privileged: list[str] = field(default_factory=list)
    restricted: list[str] = field(default_factory=list)
    system_protected: list[str] = field(default_factory=list)
    privileged_cancelled: bool = False
    privileged_failure: str | None = None


class GuardedRemovalExecutor(CleanupExecutor):
    """Executor that removes paths through the deletion guard.

    Selections are filtered by the guard, every removal unit is checked
    again right before it is touched, and units that fail with a
    permission error are handed to the escalator in a single batch.

    Subclasses provide ``step``, ``scan`` and the item labels, and may
    override ``removal_units``, ``remove_unit`` and ``is_system_protected``.

    Attributes:
        item_label: Singular and plural noun for outcome messages.

    Args:
        guard: Deletion guard.
        escalator: Escalator for units needing administrator rights.
        diagnostics: Optional event sink.
    """

    item_label: tuple[str, str] = ("item", "items")

    def __init__(
        self,
        guard: PathGuard,
        escalator: PrivilegeEscalator,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        self._guard = guard
        self._escalator = escalator
        self._diagnostics = diagnostics

    def removal_units(
        self, item: CleanupItem, dry_run: bool, report: RemovalReport
    ) -> list[str] | None:
        """Expand a selected item into the paths to remove.

        Args:
            item: Permitted selected item.
            dry_run: Whether this is a dry run.
            report: Accumulates failures found while expanding.

        Returns:
            Paths to remove, or None if the item needs no further work.
        """
        if not os.path.lexists(item.path):
            logger.warning("Cleanup target no longer exists: %s", item.path)
            return None
        return [item.path]

    def remove_unit(self, path: str) -> None:
        """Remove one unit.

        Raises:
            OSError: If removal fails.
        """
        remove_path(path)

    def is_system_protected(self, path: str) -> bool:
        """Check if a path the user cannot remove belongs to the system.

        System-protected paths are left in place instead of being
        handed to the escalator.
        """
        return False

    def queue_privileged(self, path: str, report: RemovalReport) -> None:
        """Route a path that failed with a permission error.

        Args:
            path: Path the user could not remove or list.
            report: Receives the path as privileged or system-protected.
        """
        if self.is_system_protected(path):
            logger.info("Leaving system-protected path %s in place", path)
            report.system_protected.append(path)
            self._record(
                DiagnosticsSeverity.WARNING,
                "Path is protected by the operating system and could not be removed.",
                path=path,
            )
            return
        logger.info("Removal of %s needs administrator rights", path)
        report.privileged.append(path)

    def count(self, n: int) -> str:
        """Format a count with the matching item noun."""
        singular, plural = self.item_label
        return f"{n} {singular if n == 1 else plural}"

    def execute(
        self,
        items: Sequence[CleanupItem],
        dry_run: bool,
        tracker: ProgressTracker,
        progress_update: ProgressCallback,
    ) -> CleanupOutcome:
        items = list(items)
        plural = self.item_label[1]
        if not items:
            return CleanupOutcome.ok(f"No {plural} selected.")

        try:
            guard_result = self._guard.filter(item.path for item in items)
        except RestrictedPathError as e:
            self._record(
                DiagnosticsSeverity.ERROR, "Cleanup blocked by deletion guard.", error=str(e)
            )
            return CleanupOutcome.failed(str(e), e.recovery_suggestion)

        permitted = set(guard_result.permitted)
        actionable = [item for item in items if item.path in permitted]
        self._record(
            DiagnosticsSeverity.INFO,
            "Guard evaluation completed.",
            requested=str(len(items)),
            permitted=str(len(actionable)),
            excluded=str(len(guard_result.excluded)),
        )

        if not actionable:
            if dry_run:
                message = f"Dry run: no {plural} processed because selections are protected."
            else:
                message = f"Cleanup skipped. The selected {plural} are protected by exclusions."
            return CleanupOutcome.failed(message, EXCLUSION_RECOVERY)

        tracker.advance(len(items) - len(actionable), progress_update)

        report = RemovalReport(skipped=len(guard_result.excluded))
        for item in actionable:
            units = self.removal_units(item, dry_run, report)
            if not units:
                tracker.advance(1, progress_update)
                continue
            tracker.register_additional_units(len(units) - 1, progress_update)
            for unit in units:
                self._process_unit(unit, dry_run, report)
                tracker.advance(1, progress_update)

        return self._finish(report, dry_run)

    def _process_unit(self, path: str, dry_run: bool, report: RemovalReport) -> None:
        decision = self._guard.decision(path)
        if decision is GuardDecision.EXCLUDED:
            logger.info("Skipping excluded path %s", path)
            report.skipped += 1
            return
        if decision is GuardDecision.RESTRICTED:
            logger.warning("Refusing restricted path %r", path)
            report.restricted.append(path)
            return

        if dry_run:
            report.removed += 1
            return

        try:
            self.remove_unit(path)
        except FileNotFoundError:
            logger.debug("Already removed: %s", path)
            report.removed += 1
        except OSError as e:
            if requires_administrator_privileges(e):
                self.queue_privileged(path, report)
            else:
                logger.warning("Failed to remove %s: %s", path, e)
                report.failures.append(path)
        else:
            report.removed += 1

    def _finish(self, report: RemovalReport, dry_run: bool) -> CleanupOutcome:
        if report.restricted:
            error = RestrictedPathError(report.restricted)
            return CleanupOutcome.failed(str(error), error.recovery_suggestion)

        skipped_note = (
            f" Skipped {report.skipped} protected item(s)." if report.skipped else ""
        )
        protected_note = (
            f" {len(report.system_protected)} system-protected item(s) remain for safety."
            if report.system_protected
            else ""
        )

        if dry_run:
            return CleanupOutcome.ok(
                f"Dry run: {self.count(report.removed)} selected.{skipped_note}"
            )

        if report.privileged:
            self._escalate(report)

        if not report.failures:
            return CleanupOutcome.ok(
                f"Removed {self.count(report.removed)}.{skipped_note}{protected_note}"
            )

        if report.privileged_cancelled:
            message = (
                "Administrator permission was required to remove "
                f"{self.count(len(report.failures))}."
            )
        else:
            message = f"Unable to remove {self.count(len(report.failures))}."

        recovery: list[str] = []
        if report.system_protected:
            recovery.append(SYSTEM_PROTECTED_RECOVERY)
        if report.privileged_cancelled:
            recovery.append(CANCELLED_RECOVERY)
        elif report.privileged_failure:
            recovery.append(report.privileged_failure)
        else:
            recovery.append(ACCESS_RECOVERY)
        if report.skipped:
            recovery.append(SKIPPED_RECOVERY)

        return CleanupOutcome.failed(message, " ".join(recovery))

    def _escalate(self, report: RemovalReport) -> None:
        result = self._escalator.remove(report.privileged)
        if result.is_success:
            report.removed += len(report.privileged)
        elif result.is_cancelled:
            report.failures.extend(report.privileged)
            report.privileged_cancelled = True
        else:
            report.failures.extend(report.privileged)
            report.privileged_failure = result.message

    def _record(self, severity: DiagnosticsSeverity, message: str, **metadata: str) -> None:
        emit(
            self._diagnostics,
            DiagnosticsCategory.CLEANUP,
            severity,
            message,
            step=self.step.value,
            **metadata,
        )
