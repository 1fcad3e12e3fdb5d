"""Data models for cleanup categories, items and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from reclaim.guard.models import GuardDecision
from reclaim.guard.path_guard import normalize_path


class CleanupStep(str, Enum):
    """Cleanup categories, one per registered executor.

    Attributes:
        SYSTEM_CACHES: Application caches, logs and temporary files.
        LARGE_FILES: Large files that have not been modified recently.
        DEVELOPER_ARTIFACTS: Package manager and build tool caches.
    """

    SYSTEM_CACHES = "system-caches"
    LARGE_FILES = "large-files"
    DEVELOPER_ARTIFACTS = "developer-artifacts"

    @property
    def order(self) -> int:
        """Stable sort key for display and execution."""
        return list(CleanupStep).index(self)

    @property
    def title(self) -> str:
        """Human-readable category name."""
        return {
            CleanupStep.SYSTEM_CACHES: "Caches, Logs & Temp",
            CleanupStep.LARGE_FILES: "Large & Old Files",
            CleanupStep.DEVELOPER_ARTIFACTS: "Developer Artifacts",
        }[self]

    @property
    def detail(self) -> str:
        """One-line description of what the category covers."""
        return {
            CleanupStep.SYSTEM_CACHES: (
                "Scans app caches, log files, and safe temporary directories."
            ),
            CleanupStep.LARGE_FILES: "Scans home folders for large, stale files.",
            CleanupStep.DEVELOPER_ARTIFACTS: (
                "Removes package manager caches and build artifacts."
            ),
        }[self]


@dataclass(frozen=True, slots=True)
class CleanupReason:
    """Why an item was proposed for cleanup.

    Attributes:
        code: Machine-readable reason identifier.
        label: Short human-readable label.
        detail: Optional longer explanation.
    """

    code: str
    label: str
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class CleanupItem:
    """A single removable path found by a scan.

    The path is normalized on construction. Identity within a category
    is the path; across categories it is (step, path).

    Attributes:
        path: Normalized absolute path.
        name: Display name.
        size: Size in bytes, if known.
        detail: Optional free-text description.
        selected: Whether the item is selected for removal.
        reasons: Why the item was proposed.
        guard_decision: Guard classification at scan time.
    """

    path: str
    name: str
    size: int | None = None
    detail: str | None = None
    selected: bool = True
    reasons: tuple[CleanupReason, ...] = ()
    guard_decision: GuardDecision = GuardDecision.ALLOW

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))


@dataclass(frozen=True, slots=True)
class CleanupCategory:
    """Scan result for one cleanup step.

    A category without items is never enabled. When ``enabled`` is not
    given it defaults to True for non-empty categories.

    Attributes:
        step: Step this category belongs to.
        items: Items in display order.
        enabled: Whether the category takes part in the next run.
        error: Scan problem worth showing the user.
        note: Informational note about the category.
    """

    step: CleanupStep
    items: tuple[CleanupItem, ...] = ()
    enabled: bool | None = None
    error: str | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        enabled = bool(self.items) and (self.enabled if self.enabled is not None else True)
        object.__setattr__(self, "enabled", enabled)

    @property
    def title(self) -> str:
        """Display title of the step."""
        return self.step.title

    @property
    def selected_items(self) -> list[CleanupItem]:
        """Selected items, or none if the category is disabled."""
        if not self.enabled:
            return []
        return [item for item in self.items if item.selected]

    @property
    def selected_count(self) -> int:
        """Number of selected items."""
        return len(self.selected_items)

    @property
    def total_count(self) -> int:
        """Number of items."""
        return len(self.items)

    @property
    def selected_size(self) -> int | None:
        """Total known size of selected items, or None if zero."""
        return _sum_sizes(self.selected_items)

    @property
    def total_size(self) -> int | None:
        """Total known size of all items, or None if zero."""
        return _sum_sizes(self.items)

    @property
    def has_selection(self) -> bool:
        """Check if the category is enabled with at least one selected item."""
        return self.selected_count > 0


def _sum_sizes(items: list[CleanupItem] | tuple[CleanupItem, ...]) -> int | None:
    total = sum(item.size for item in items if item.size is not None)
    return total or None


class StepStatus(str, Enum):
    """Run state of a single cleanup step."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class StepState:
    """Run state of a step with its outcome message.

    Attributes:
        status: Current status.
        message: Outcome message once finished.
        recovery: Recovery suggestion for failures.
    """

    status: StepStatus = StepStatus.PENDING
    message: str | None = None
    recovery: str | None = None

    @classmethod
    def pending(cls) -> StepState:
        return cls(StepStatus.PENDING)

    @classmethod
    def running(cls) -> StepState:
        return cls(StepStatus.RUNNING)

    @classmethod
    def from_outcome(cls, outcome: CleanupOutcome) -> StepState:
        """Build the finished state for an executor outcome."""
        if outcome.success:
            return cls(StepStatus.SUCCESS, outcome.message)
        return cls(StepStatus.FAILURE, outcome.message, outcome.recovery_suggestion)


@dataclass(frozen=True, slots=True)
class CleanupOutcome:
    """Result of executing one cleanup step.

    Attributes:
        success: Whether the step completed without failures.
        message: Human-readable outcome.
        recovery_suggestion: What the user can do about a failure.
    """

    success: bool
    message: str
    recovery_suggestion: str | None = None

    @classmethod
    def ok(cls, message: str) -> CleanupOutcome:
        """Create a successful outcome."""
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str, recovery_suggestion: str | None = None) -> CleanupOutcome:
        """Create a failed outcome."""
        return cls(success=False, message=message, recovery_suggestion=recovery_suggestion)


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Final report of a cleanup run.

    Attributes:
        success: True if no step failed.
        headline: One-line summary.
        details: One "<title>: <message>" line per active step, in order.
        recovery: De-duplicated recovery suggestions, space-joined.
        dry_run: Whether the run was a dry run.
    """

    success: bool
    headline: str
    details: tuple[str, ...]
    recovery: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class PreviewCategory:
    """Selection snapshot of one category.

    Attributes:
        step: Category step.
        title: Display title.
        total_count: Number of items.
        selected_count: Number of selected items.
        selected_size: Known size of selected items.
        items: Selected items.
    """

    step: CleanupStep
    title: str
    total_count: int
    selected_count: int
    selected_size: int | None
    items: tuple[CleanupItem, ...]


@dataclass(frozen=True, slots=True)
class DryRunPreview:
    """Snapshot of what a run would touch.

    Attributes:
        categories: Per-category selection snapshots.
        generated_at: When the preview was built (UTC).
    """

    categories: tuple[PreviewCategory, ...]
    generated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def selected_count(self) -> int:
        """Total number of selected items."""
        return sum(category.selected_count for category in self.categories)
