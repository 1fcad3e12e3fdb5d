"""Shared types and wiring for CLI commands.

This module provides the step selection enum and builds the cleanup
engine from configuration so every command is wired the same way.
"""

from enum import Enum

import typer

from reclaim.cleanup.base import CleanupExecutor
from reclaim.cleanup.executors import default_executors
from reclaim.cleanup.models import CleanupStep
from reclaim.cleanup.orchestrator import CleanupOrchestrator
from reclaim.core.config import ConfigError, ReclaimConfig, load_config
from reclaim.core.diagnostics import DiagnosticsSink
from reclaim.guard.path_guard import PathGuard
from reclaim.guard.safe_roots import SafePathFilter, expand_safe_roots
from reclaim.preferences.store import ExclusionStore, TomlExclusionStore
from reclaim.privilege.confirm import Confirmer
from reclaim.privilege.escalator import PrivilegeEscalator
from reclaim.utils.formatting import print_error


class StepChoice(str, Enum):
    """Cleanup steps selectable from the command line."""

    SYSTEM_CACHES = CleanupStep.SYSTEM_CACHES.value
    LARGE_FILES = CleanupStep.LARGE_FILES.value
    DEVELOPER_ARTIFACTS = CleanupStep.DEVELOPER_ARTIFACTS.value
    ALL = "all"


def get_steps(choice: StepChoice = StepChoice.ALL) -> set[CleanupStep]:
    """Map a CLI step choice to cleanup steps.

    Args:
        choice: The step choice.

    Returns:
        Steps to include.
    """
    if choice == StepChoice.ALL:
        return set(CleanupStep)
    return {CleanupStep(choice.value)}


def require_config() -> ReclaimConfig:
    """Load configuration or exit with an error.

    Returns:
        Loaded ReclaimConfig.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def build_orchestrator(
    config: ReclaimConfig,
    confirmer: Confirmer,
    steps: set[CleanupStep] | None = None,
    diagnostics: DiagnosticsSink | None = None,
    store: ExclusionStore | None = None,
) -> CleanupOrchestrator:
    """Wire guard, escalator and executors into an orchestrator.

    Args:
        config: Runtime configuration.
        confirmer: Confirms administrator escalation.
        steps: Steps to register. Defaults to all.
        diagnostics: Optional event sink.
        store: Exclusion store. Defaults to the persisted store.

    Returns:
        Ready-to-scan orchestrator.
    """
    guard = PathGuard(store if store is not None else TomlExclusionStore())
    escalator = PrivilegeEscalator.from_config(config, confirmer, diagnostics)
    executors: list[CleanupExecutor] = [
        executor
        for executor in default_executors(guard, escalator, config, diagnostics)
        if steps is None or executor.step in steps
    ]
    safe_filter = SafePathFilter(guard, expand_safe_roots(extra=config.extra_safe_roots))
    return CleanupOrchestrator(
        executors,
        guard,
        safe_filter=safe_filter,
        diagnostics=diagnostics,
    )
