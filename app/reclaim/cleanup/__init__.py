"""Cleanup engine: data model, executors, progress and orchestration."""

from reclaim.cleanup.base import CleanupExecutor, GuardedRemovalExecutor
from reclaim.cleanup.models import (
    CleanupCategory,
    CleanupItem,
    CleanupOutcome,
    CleanupReason,
    CleanupStep,
    DryRunPreview,
    PreviewCategory,
    RunSummary,
    StepState,
    StepStatus,
)
from reclaim.cleanup.orchestrator import CleanupOrchestrator, OrchestratorState
from reclaim.cleanup.progress import ProgressTracker, clamp

__all__ = [
    "CleanupCategory",
    "CleanupExecutor",
    "CleanupItem",
    "CleanupOrchestrator",
    "CleanupOutcome",
    "CleanupReason",
    "CleanupStep",
    "DryRunPreview",
    "GuardedRemovalExecutor",
    "OrchestratorState",
    "PreviewCategory",
    "ProgressTracker",
    "RunSummary",
    "StepState",
    "StepStatus",
    "clamp",
]
