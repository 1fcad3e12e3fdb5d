"""Filesystem helpers shared by executor scans."""

import logging
import os
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime

from reclaim.cleanup.models import CleanupItem, CleanupReason

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    """Check if a directory entry name is hidden."""
    return name.startswith(".")


def directory_size(path: str) -> int:
    """Sum the sizes of regular files beneath a directory.

    Unreadable entries are skipped. Symlinks are not followed.

    Args:
        path: Directory to measure.

    Returns:
        Total size in bytes.
    """
    total = 0
    stack = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError as e:
            logger.debug("Cannot measure %s: %s", current, e)
    return total


def entry_size(path: str) -> int | None:
    """Size of a file or directory, or None if it cannot be read."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            return directory_size(path)
        return os.lstat(path).st_size
    except OSError:
        return None


def modified_detail(base: str, mtime: float) -> str:
    """Append a modification date to a detail string."""
    return f"{base} • Modified {datetime.fromtimestamp(mtime):%Y-%m-%d}"


def collect_children(
    root: str,
    *,
    include_files: bool,
    directory_detail: str,
    file_detail: str,
    prefix: str,
    failures: list[str],
) -> list[CleanupItem]:
    """List the non-hidden children of a directory as cleanup items.

    Args:
        root: Directory whose children are listed.
        include_files: Also list regular files (directories always are).
        directory_detail: Detail text for directory entries.
        file_detail: Detail text for file entries.
        prefix: Display name prefix.
        failures: Receives root if it cannot be listed.

    Returns:
        Items for the children, unsorted.
    """
    if not os.path.isdir(root):
        return []

    items: list[CleanupItem] = []
    try:
        with os.scandir(root) as entries:
            for entry in entries:
                if is_hidden(entry.name):
                    continue
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    if is_dir:
                        items.append(
                            CleanupItem(
                                path=entry.path,
                                name=f"{prefix} • {entry.name}",
                                size=directory_size(entry.path),
                                detail=directory_detail,
                                reasons=(CleanupReason("category", directory_detail),),
                            )
                        )
                    elif include_files and entry.is_file(follow_symlinks=False):
                        stat = entry.stat(follow_symlinks=False)
                        detail = modified_detail(file_detail, stat.st_mtime)
                        items.append(
                            CleanupItem(
                                path=entry.path,
                                name=f"{prefix} • {entry.name}",
                                size=stat.st_size,
                                detail=detail,
                                reasons=(CleanupReason("file", file_detail, detail),),
                            )
                        )
                except OSError as e:
                    logger.debug("Skipping unreadable entry %s: %s", entry.path, e)
    except OSError as e:
        logger.info("Cannot list %s: %s", root, e)
        failures.append(root)

    return items


def collect_matching_directories(
    root: str,
    *,
    keywords: Sequence[str],
    depth: int,
    detail: str,
    prefix: str,
    failures: list[str],
) -> list[CleanupItem]:
    """Find directories whose name contains one of ``keywords``.

    A matching directory is reported and not descended into. Otherwise
    the search continues up to ``depth`` levels below root.

    Args:
        root: Directory to search.
        keywords: Lower-case name fragments.
        depth: Extra levels to descend below root's children.
        detail: Detail text for matches.
        prefix: Display name prefix.
        failures: Receives directories that cannot be listed.

    Returns:
        Matching directories as cleanup items.
    """
    if not os.path.isdir(root):
        return []
    return list(_walk_matching(root, keywords, depth, detail, prefix, failures))


def _walk_matching(
    current: str,
    keywords: Sequence[str],
    remaining: int,
    detail: str,
    prefix: str,
    failures: list[str],
) -> Iterator[CleanupItem]:
    try:
        with os.scandir(current) as it:
            entries = [e for e in it if not is_hidden(e.name) and e.is_dir(follow_symlinks=False)]
    except OSError as e:
        logger.info("Cannot list %s: %s", current, e)
        failures.append(current)
        return

    for entry in entries:
        lowered = entry.name.lower()
        match = next((keyword for keyword in keywords if keyword in lowered), None)
        if match is not None:
            yield CleanupItem(
                path=entry.path,
                name=f"{prefix} • {entry.name}",
                size=directory_size(entry.path),
                detail=detail,
                reasons=(CleanupReason("keyword", f'Matches "{match}"', detail),),
            )
        elif remaining > 0:
            yield from _walk_matching(entry.path, keywords, remaining - 1, detail, prefix, failures)


def dedupe(items: Iterable[CleanupItem]) -> list[CleanupItem]:
    """Drop items whose path was already seen, keeping the first."""
    seen: set[str] = set()
    unique: list[CleanupItem] = []
    for item in items:
        if item.path in seen:
            continue
        seen.add(item.path)
        unique.append(item)
    return unique


def sort_items(items: Iterable[CleanupItem]) -> list[CleanupItem]:
    """Sort by size descending (unknown sizes last), then by name."""
    return sorted(
        items,
        key=lambda item: (
            item.size is None,
            -(item.size or 0),
            item.name.casefold(),
        ),
    )
