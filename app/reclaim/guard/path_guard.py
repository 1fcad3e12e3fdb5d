"""Path guard deciding whether a filesystem path may be touched.

Paths are normalized to an absolute, canonical form before evaluation so
that exclusion membership is an exact string comparison. Symlinks are
not resolved: the guard judges the path the caller names, not its target.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from reclaim.guard.models import (
    ExcludedPathError,
    GuardDecision,
    GuardResult,
    RestrictedPathError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reclaim.preferences.store import ExclusionStore

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


def normalize_path(path: str) -> str:
    """Normalize a path to an absolute, canonical string.

    Resolves ``.`` and ``..`` components, collapses repeated and trailing
    separators and anchors relative paths at the current directory. A
    leading ``~`` is not expanded, so callers expand user paths first.
    Empty or whitespace-only input normalizes to the empty string.

    Args:
        path: Path to normalize.

    Returns:
        Normalized absolute path, or "" for empty input.
    """
    if not path or not path.strip():
        return ""

    normalized = os.path.abspath(path)
    # POSIX keeps a leading "//" as implementation-defined; fold it
    if normalized.startswith("//"):
        normalized = ROOT_PATH + normalized.lstrip("/")
    return normalized


class PathGuard:
    """Classifies paths as allowed, excluded or restricted.

    The exclusion set is read from the store on every decision so toggles
    made elsewhere take effect immediately.

    Args:
        store: Source of user-configured exclusions.
    """

    def __init__(self, store: ExclusionStore) -> None:
        self._store = store

    def decision(self, path: str) -> GuardDecision:
        """Classify a single path.

        Args:
            path: Path to classify (normalized internally).

        Returns:
            GuardDecision for the normalized path.
        """
        return self._decide(normalize_path(path))

    def filter(self, paths: Iterable[str]) -> GuardResult:
        """Partition paths into permitted and excluded lists.

        Fails closed: a single restricted path rejects the whole batch.

        Args:
            paths: Paths to classify.

        Returns:
            GuardResult with normalized permitted and excluded paths.

        Raises:
            RestrictedPathError: If any path is restricted.
        """
        permitted: list[str] = []
        excluded: list[str] = []
        restricted: list[str] = []

        for path in paths:
            normalized = normalize_path(path)
            decision = self._decide(normalized)
            if decision is GuardDecision.ALLOW:
                permitted.append(normalized)
            elif decision is GuardDecision.EXCLUDED:
                excluded.append(normalized)
            else:
                restricted.append(normalized)

        if restricted:
            logger.warning("Rejecting batch with %d restricted path(s)", len(restricted))
            raise RestrictedPathError(restricted)

        return GuardResult(permitted=tuple(permitted), excluded=tuple(excluded))

    def ensure_allowed(self, path: str) -> None:
        """Ensure a single path may be removed.

        Args:
            path: Path to check.

        Raises:
            RestrictedPathError: If the path is restricted.
            ExcludedPathError: If the path is excluded.
        """
        result = self.filter([path])
        if not result.has_permitted:
            raise ExcludedPathError(result.excluded)

    def _decide(self, normalized: str) -> GuardDecision:
        if is_restricted(normalized):
            return GuardDecision.RESTRICTED
        if self._store.is_excluded(normalized):
            return GuardDecision.EXCLUDED
        return GuardDecision.ALLOW


def is_restricted(normalized: str) -> bool:
    """Check if a normalized path is structurally unsafe to delete.

    Args:
        normalized: Output of normalize_path().

    Returns:
        True for the empty path and the filesystem root.
    """
    return normalized in ("", ROOT_PATH)
