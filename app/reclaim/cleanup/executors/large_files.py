"""Large files that have not been modified recently."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from send2trash import send2trash

from reclaim.cleanup.base import GuardedRemovalExecutor
from reclaim.cleanup.discovery import dedupe, is_hidden, modified_detail, sort_items
from reclaim.cleanup.models import CleanupCategory, CleanupItem, CleanupReason, CleanupStep
from reclaim.core.config import ReclaimConfig
from reclaim.core.diagnostics import DiagnosticsSeverity

if TYPE_CHECKING:
    from reclaim.core.diagnostics import DiagnosticsSink
    from reclaim.guard.path_guard import PathGuard
    from reclaim.privilege.escalator import PrivilegeEscalator

logger = logging.getLogger(__name__)

SEARCH_FOLDERS = ("Downloads", "Desktop", "Videos", "Movies")

SECONDS_PER_DAY = 86_400


class LargeFileExecutor(GuardedRemovalExecutor):
    """Finds large, stale files and moves them to the trash.

    Args:
        guard: Deletion guard.
        escalator: Escalator for paths needing administrator rights.
        config: Supplies size/age thresholds and the result cap.
        diagnostics: Optional event sink.
        home: Home directory override.
        roots: Directories to search instead of the home folders.
        now: Clock override (epoch seconds) for age checks.
    """

    item_label = ("large file", "large files")

    def __init__(
        self,
        guard: PathGuard,
        escalator: PrivilegeEscalator,
        config: ReclaimConfig | None = None,
        diagnostics: DiagnosticsSink | None = None,
        *,
        home: Path | None = None,
        roots: Sequence[str] | None = None,
        now: float | None = None,
    ) -> None:
        super().__init__(guard, escalator, diagnostics)
        self._config = config or ReclaimConfig()
        home_dir = str(home if home is not None else Path.home())
        self._roots = (
            list(roots)
            if roots is not None
            else [home_dir, *(os.path.join(home_dir, name) for name in SEARCH_FOLDERS)]
        )
        self._now = now

    @property
    def step(self) -> CleanupStep:
        return CleanupStep.LARGE_FILES

    def scan(self) -> CleanupCategory:
        threshold = self._config.large_file_threshold_bytes
        min_age_days = self._config.large_file_min_age_days
        now = self._now if self._now is not None else time.time()
        cutoff = now - min_age_days * SECONDS_PER_DAY

        found: list[CleanupItem] = []
        for root in self._roots:
            if os.path.isdir(root):
                found.extend(self._walk(root, threshold, cutoff, min_age_days))

        items = sort_items(dedupe(found))[: self._config.large_file_max_results]
        self._record(
            DiagnosticsSeverity.INFO,
            "Large file scan completed.",
            discovered=str(len(items)),
            threshold=str(threshold),
        )
        return CleanupCategory(step=self.step, items=tuple(items))

    def _walk(
        self, root: str, threshold: int, cutoff: float, min_age_days: int
    ) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        size_label = f"Larger than {self._config.large_file_threshold_mb} MB"
        age_label = f"Untouched for {min_age_days}+ days"

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._log_walk_error):
            dirnames[:] = [d for d in dirnames if not is_hidden(d)]
            for filename in filenames:
                if is_hidden(filename):
                    continue
                path = os.path.join(dirpath, filename)
                try:
                    stat = os.lstat(path)
                except OSError:
                    continue
                if not os.path.isfile(path) or os.path.islink(path):
                    continue
                if stat.st_size < threshold or stat.st_mtime > cutoff:
                    continue
                items.append(
                    CleanupItem(
                        path=path,
                        name=filename,
                        size=stat.st_size,
                        detail=modified_detail("Large file", stat.st_mtime),
                        reasons=(
                            CleanupReason("size", size_label),
                            CleanupReason("age", age_label),
                        ),
                    )
                )
        return items

    @staticmethod
    def _log_walk_error(error: OSError) -> None:
        logger.debug("Skipping unreadable directory: %s", error)

    def remove_unit(self, path: str) -> None:
        send2trash(path)
