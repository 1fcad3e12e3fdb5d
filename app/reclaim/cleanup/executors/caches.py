"""Caches, logs and temporary files."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from reclaim.cleanup.base import (
    GuardedRemovalExecutor,
    RemovalReport,
    requires_administrator_privileges,
)
from reclaim.cleanup.discovery import (
    collect_children,
    collect_matching_directories,
    dedupe,
    directory_size,
    is_hidden,
    sort_items,
)
from reclaim.cleanup.models import CleanupCategory, CleanupItem, CleanupReason, CleanupStep
from reclaim.core.diagnostics import DiagnosticsSeverity

if TYPE_CHECKING:
    from reclaim.core.diagnostics import DiagnosticsSink
    from reclaim.guard.path_guard import PathGuard
    from reclaim.privilege.escalator import PrivilegeEscalator

logger = logging.getLogger(__name__)

CACHE_KEYWORDS = ("cache", "caches", "tmp", "temp")
LOG_KEYWORDS = ("log", "logs")

CATEGORY_NOTE = "Caches, logs, and temporary files are regenerated automatically by your apps."


def default_temp_roots(platform: str = sys.platform) -> tuple[str, ...]:
    """Temporary roots whose entries may belong to the operating system."""
    roots = (tempfile.gettempdir(), "/tmp", "/var/tmp")
    if platform == "darwin":
        roots += ("/var/folders",)
    return tuple(dict.fromkeys(roots))


def is_system_temp_entry(path: str, temp_roots: Sequence[str]) -> bool:
    """Check if a temporary entry is owned by the operating system.

    Only entries below one of the temporary roots qualify. They are
    protected when owned by root, when their metadata cannot be read, or
    when they are Apple service entries inside a per-user ``T`` folder.

    Args:
        path: Absolute path that failed with a permission error.
        temp_roots: Temporary roots to consider.

    Returns:
        True if the path should be left in place.
    """
    if not any(path.startswith(root.rstrip(os.sep) + os.sep) for root in temp_roots):
        return False
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    if st.st_uid == 0:
        return True
    parents = path.split(os.sep)[:-1]
    return "T" in parents and os.path.basename(path).startswith("com.apple.")


class SystemCacheExecutor(GuardedRemovalExecutor):
    """Cleans caches, logs and temporary files.

    Selected directories are emptied rather than removed, so
    applications keep their cache roots. Selected files are removed.

    Args:
        guard: Deletion guard.
        escalator: Escalator for paths needing administrator rights.
        diagnostics: Optional event sink.
        home: Home directory override.
        platform: sys.platform value selecting macOS locations.
        targets: Explicit (path, name) directories to offer instead of
            the built-in locations.
        temp_roots: Roots whose root-owned entries are left in place
            when removal is denied.
    """

    item_label = ("cache item", "cache items")

    def __init__(
        self,
        guard: PathGuard,
        escalator: PrivilegeEscalator,
        diagnostics: DiagnosticsSink | None = None,
        *,
        home: Path | None = None,
        platform: str = sys.platform,
        targets: Sequence[tuple[str, str]] | None = None,
        temp_roots: Sequence[str] | None = None,
    ) -> None:
        super().__init__(guard, escalator, diagnostics)
        self._home = home if home is not None else Path.home()
        self._platform = platform
        self._targets = list(targets) if targets is not None else None
        self._temp_roots = (
            tuple(temp_roots) if temp_roots is not None else default_temp_roots(platform)
        )

    @property
    def step(self) -> CleanupStep:
        return CleanupStep.SYSTEM_CACHES

    def scan(self) -> CleanupCategory:
        if self._targets is not None:
            return self._scan_targets(self._targets)
        return self._scan_locations()

    def _scan_targets(self, targets: list[tuple[str, str]]) -> CleanupCategory:
        items: list[CleanupItem] = []
        failures: list[str] = []

        for path, name in targets:
            if not os.path.isdir(path):
                continue
            try:
                count = sum(1 for entry in os.listdir(path) if not is_hidden(entry))
            except OSError as e:
                logger.info("Cannot list cleanup target %s: %s", path, e)
                failures.append(name)
                continue
            detail = "Empty" if count == 0 else f"{count} top-level items"
            items.append(
                CleanupItem(
                    path=path,
                    name=name,
                    size=directory_size(path),
                    detail=detail,
                    reasons=(CleanupReason("target", "Targeted directory", detail),),
                )
            )

        error = f"Limited preview access for: {', '.join(failures)}." if failures else None
        return CleanupCategory(step=self.step, items=tuple(items), error=error)

    def _scan_locations(self) -> CleanupCategory:
        home = str(self._home)
        failures: list[str] = []
        items: list[CleanupItem] = []

        items += collect_children(
            os.path.join(home, ".cache"),
            include_files=False,
            directory_detail="User cache directory",
            file_detail="User cache file",
            prefix="User Cache",
            failures=failures,
        )
        items += collect_matching_directories(
            os.path.join(home, ".local", "share"),
            keywords=CACHE_KEYWORDS + LOG_KEYWORDS,
            depth=2,
            detail="Application data cache directory",
            prefix="App Data",
            failures=failures,
        )
        items += collect_children(
            "/var/cache",
            include_files=False,
            directory_detail="Shared cache directory",
            file_detail="Shared cache file",
            prefix="System Cache",
            failures=failures,
        )
        items += collect_children(
            "/var/log",
            include_files=True,
            directory_detail="System log directory",
            file_detail="System log file",
            prefix="System Logs",
            failures=failures,
        )

        if self._platform == "darwin":
            items += self._scan_macos_library(home, failures)

        for root in dict.fromkeys((tempfile.gettempdir(), "/tmp", "/var/tmp")):
            items += collect_children(
                root,
                include_files=True,
                directory_detail="Temporary directory",
                file_detail="Temporary file",
                prefix="Temp",
                failures=failures,
            )

        unique = sort_items(dedupe(items))
        error = None
        if failures:
            limited = list(dict.fromkeys(failures))[:5]
            error = f"Limited access to: {', '.join(limited)}."

        self._record(
            DiagnosticsSeverity.INFO,
            "Cache scan completed.",
            discovered=str(len(unique)),
            failures=str(len(failures)),
        )
        return CleanupCategory(step=self.step, items=tuple(unique), error=error, note=CATEGORY_NOTE)

    def _scan_macos_library(self, home: str, failures: list[str]) -> list[CleanupItem]:
        library = os.path.join(home, "Library")
        items: list[CleanupItem] = []
        for root, include_files, label, prefix in (
            (os.path.join(library, "Caches"), False, "User cache", "User Cache"),
            ("/Library/Caches", False, "Shared cache", "System Cache"),
            (os.path.join(library, "Logs"), True, "User log", "User Logs"),
            ("/Library/Logs", True, "System log", "System Logs"),
        ):
            items += collect_children(
                root,
                include_files=include_files,
                directory_detail=f"{label} directory",
                file_detail=f"{label} file",
                prefix=prefix,
                failures=failures,
            )
        return items

    def is_system_protected(self, path: str) -> bool:
        return is_system_temp_entry(path, self._temp_roots)

    def removal_units(
        self, item: CleanupItem, dry_run: bool, report: RemovalReport
    ) -> list[str] | None:
        path = item.path
        if not os.path.lexists(path):
            logger.warning("Cache target no longer exists: %s", path)
            return None

        if not os.path.isdir(path) or os.path.islink(path):
            return [path]

        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            if not dry_run and requires_administrator_privileges(e):
                self.queue_privileged(path, report)
            else:
                logger.warning("Cannot list cache directory %s: %s", path, e)
                report.failures.append(path)
            return None

        return [os.path.join(path, entry) for entry in entries]
