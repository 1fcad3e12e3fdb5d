"""Built-in cleanup executors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reclaim.cleanup.executors.caches import SystemCacheExecutor
from reclaim.cleanup.executors.developer import DeveloperArtifactExecutor
from reclaim.cleanup.executors.large_files import LargeFileExecutor

if TYPE_CHECKING:
    from reclaim.cleanup.base import CleanupExecutor
    from reclaim.core.config import ReclaimConfig
    from reclaim.core.diagnostics import DiagnosticsSink
    from reclaim.guard.path_guard import PathGuard
    from reclaim.privilege.escalator import PrivilegeEscalator

__all__ = [
    "DeveloperArtifactExecutor",
    "LargeFileExecutor",
    "SystemCacheExecutor",
    "default_executors",
]


def default_executors(
    guard: PathGuard,
    escalator: PrivilegeEscalator,
    config: ReclaimConfig,
    diagnostics: DiagnosticsSink | None = None,
) -> list[CleanupExecutor]:
    """Build the executor registry in step order.

    Args:
        guard: Deletion guard shared by all executors.
        escalator: Escalator shared by all executors.
        config: Runtime configuration.
        diagnostics: Optional event sink.

    Returns:
        One executor per cleanup step.
    """
    return [
        SystemCacheExecutor(guard, escalator, diagnostics),
        LargeFileExecutor(guard, escalator, config, diagnostics),
        DeveloperArtifactExecutor(guard, escalator, diagnostics),
    ]
