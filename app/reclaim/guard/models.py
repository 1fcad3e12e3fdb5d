"""Deletion guard decisions, results and errors."""

from dataclasses import dataclass
from enum import Enum


class GuardDecision(str, Enum):
    """Classification of a path prior to any deletion.

    Attributes:
        ALLOW: Path may be removed.
        EXCLUDED: Path is protected by the user's exclusion list.
        RESTRICTED: Path is structurally unsafe (empty or the filesystem root).
    """

    ALLOW = "allow"
    EXCLUDED = "excluded"
    RESTRICTED = "restricted"

    @property
    def display_name(self) -> str:
        """Title-cased label for display."""
        return {
            GuardDecision.ALLOW: "Allowed",
            GuardDecision.EXCLUDED: "Excluded",
            GuardDecision.RESTRICTED: "Restricted",
        }[self]


@dataclass(frozen=True, slots=True)
class GuardResult:
    """Partition of a batch of paths by guard decision.

    Attributes:
        permitted: Normalized paths that may be removed.
        excluded: Normalized paths protected by exclusions.
    """

    permitted: tuple[str, ...]
    excluded: tuple[str, ...]

    @property
    def has_permitted(self) -> bool:
        """Check if at least one path may be removed."""
        return bool(self.permitted)


class GuardViolation(Exception):
    """Base exception for paths the guard refuses to act on.

    Attributes:
        paths: Offending normalized paths.
    """

    recovery_suggestion: str = ""

    def __init__(self, paths: list[str] | tuple[str, ...]) -> None:
        self.paths = tuple(paths)
        super().__init__(self._describe(", ".join(self.paths)))

    def _describe(self, display: str) -> str:
        raise NotImplementedError


class RestrictedPathError(GuardViolation):
    """Raised when a batch contains structurally unsafe paths."""

    recovery_suggestion = "Adjust your selection to avoid root-level directories."

    def _describe(self, display: str) -> str:
        return f"Deletion blocked to protect system path(s): {display}."


class ExcludedPathError(GuardViolation):
    """Raised when every candidate path is protected by exclusions."""

    recovery_suggestion = "Update the exclusion list from Preferences before retrying."

    def _describe(self, display: str) -> str:
        return f"Deletion skipped for protected path(s): {display}."
