"""Allow-list of directories that cleanup is permitted to operate in.

This is a second safety layer independent of the deletion guard: an
item is only kept when it lies under one of these roots *and* the guard
does not restrict it.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol, TypeVar

from reclaim.guard.models import GuardDecision
from reclaim.guard.path_guard import PathGuard, is_restricted, normalize_path

# Recognized safe roots.
# Patterns starting with ~ are expanded to the user's home directory.
SAFE_ROOT_PATTERNS: list[str] = [
    # User home and XDG data
    "~",
    "~/.cache",
    "~/.local/share",
    "~/.local/state",
    # macOS user library
    "~/Library/Caches",
    "~/Library/Logs",
    "~/Library/Application Support",
    # Shared temporary locations
    "/tmp",
    "/var/tmp",
    "/private/tmp",
    "/private/var/tmp",
    "/private/var/folders",
    "/Users/Shared",
    # System-level caches and logs
    "/var/cache",
    "/var/log",
    "/private/var/log",
    "/Library/Caches",
    "/Library/Logs",
]


class _HasPath(Protocol):
    @property
    def path(self) -> str: ...


T = TypeVar("T", bound=_HasPath)


def expand_safe_roots(
    patterns: Sequence[str] = tuple(SAFE_ROOT_PATTERNS),
    *,
    home: Path | None = None,
    extra: Iterable[str] = (),
) -> tuple[str, ...]:
    """Expand root patterns into normalized absolute paths.

    The platform temp directory is always included. Entries that would
    normalize to the filesystem root are dropped.

    Args:
        patterns: Root patterns, ~ expanded against the home directory.
        home: Home directory override.
        extra: Additional absolute roots (e.g., from configuration).

    Returns:
        De-duplicated tuple of normalized roots, in input order.
    """
    home_str = str(home if home is not None else Path.home())
    roots: list[str] = []

    for pattern in (*patterns, *extra, tempfile.gettempdir()):
        expanded = home_str + pattern[1:] if pattern.startswith("~") else pattern
        normalized = normalize_path(expanded)
        if is_restricted(normalized) or normalized in roots:
            continue
        roots.append(normalized)

    return tuple(roots)


class SafePathFilter:
    """Keeps only items that lie under a safe root and are not restricted.

    Args:
        guard: Deletion guard consulted for every item.
        roots: Normalized safe roots. Defaults to expand_safe_roots().
    """

    def __init__(self, guard: PathGuard, roots: Sequence[str] | None = None) -> None:
        self._guard = guard
        self._roots = tuple(roots) if roots is not None else expand_safe_roots()

    @property
    def roots(self) -> tuple[str, ...]:
        """Normalized safe roots in use."""
        return self._roots

    def is_within_safe_root(self, path: str) -> bool:
        """Check if a path equals or lies beneath a safe root.

        Args:
            path: Path to check (normalized internally).

        Returns:
            True if the path is inside the allow-list.
        """
        normalized = normalize_path(path)
        if not normalized:
            return False
        return any(normalized == root or normalized.startswith(root + "/") for root in self._roots)

    def permits(self, path: str) -> bool:
        """Check both safety layers for a single path.

        Args:
            path: Path to check.

        Returns:
            True only if the path is under a safe root and not restricted.
        """
        if not self.is_within_safe_root(path):
            return False
        return self._guard.decision(path) is not GuardDecision.RESTRICTED

    def filter(self, items: Iterable[T]) -> list[T]:
        """Drop items that fail either safety layer.

        Args:
            items: Objects exposing a ``path`` attribute.

        Returns:
            Items that pass both layers, in input order.
        """
        return [item for item in items if self.permits(item.path)]
