"""Exclusion preferences storage.

The exclusion set is a collection of normalized absolute paths the user
has protected from cleanup. The deletion guard reads it on every
decision; the CLI writes it when the user toggles an exclusion.

Persistent storage is ~/.config/reclaim/exclusions.toml:

    excluded_paths = ["/home/user/.cache/keep-me"]
"""

import logging
import os
import threading
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Protocol

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reclaim.core.paths import get_exclusions_path
from reclaim.guard.path_guard import normalize_path

logger = logging.getLogger(__name__)


class ExclusionStore(Protocol):
    """Synchronous read/write access to the exclusion set."""

    def is_excluded(self, path: str) -> bool: ...

    def excluded_paths(self) -> set[str]: ...

    def update_exclusion(self, path: str, excluded: bool) -> None: ...


class DeletionPreferences(BaseModel):
    """Persisted deletion preferences.

    Attributes:
        excluded_paths: Normalized absolute paths protected from cleanup.
    """

    model_config = ConfigDict(extra="forbid")

    excluded_paths: Annotated[
        list[str],
        Field(description="Normalized absolute paths protected from cleanup"),
    ] = []


class MemoryExclusionStore:
    """In-memory exclusion store.

    Args:
        paths: Initial exclusions (normalized on entry).
    """

    def __init__(self, paths: list[str] | set[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._paths: set[str] = {normalize_path(p) for p in paths or () if normalize_path(p)}

    def is_excluded(self, path: str) -> bool:
        """Check if a path is in the exclusion set."""
        normalized = normalize_path(path)
        with self._lock:
            return normalized in self._paths

    def excluded_paths(self) -> set[str]:
        """Return a copy of the exclusion set."""
        with self._lock:
            return set(self._paths)

    def update_exclusion(self, path: str, excluded: bool) -> None:
        """Add or remove a path from the exclusion set.

        Args:
            path: Path to toggle (normalized on entry).
            excluded: True to protect the path, False to release it.
        """
        normalized = normalize_path(path)
        if not normalized:
            return
        with self._lock:
            if excluded:
                self._paths.add(normalized)
            else:
                self._paths.discard(normalized)
            self._on_change(set(self._paths))

    def _on_change(self, snapshot: set[str]) -> None:
        """Hook invoked with the new set after every update (lock held)."""


class TomlExclusionStore(MemoryExclusionStore):
    """Exclusion store persisted to a TOML file.

    The file is loaded once on construction and rewritten atomically
    after every update. A missing or corrupt file yields an empty set.

    Args:
        path: Storage file. Defaults to ~/.config/reclaim/exclusions.toml.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._storage_path = path or get_exclusions_path()
        super().__init__(self._load())

    @property
    def storage_path(self) -> Path:
        """File backing this store."""
        return self._storage_path

    def _load(self) -> list[str]:
        if not self._storage_path.exists():
            return []

        try:
            with open(self._storage_path, "rb") as f:
                data = tomllib.load(f)
            preferences = DeletionPreferences.model_validate(data)
        except (tomllib.TOMLDecodeError, ValidationError, OSError) as e:
            logger.warning("Ignoring unreadable exclusions file %s: %s", self._storage_path, e)
            return []

        return preferences.excluded_paths

    def _on_change(self, snapshot: set[str]) -> None:
        preferences = DeletionPreferences(excluded_paths=sorted(snapshot))

        tmp_path: Path | None = None
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="wb",
                dir=self._storage_path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                tomli_w.dump(preferences.model_dump(), f)
            os.replace(str(tmp_path), str(self._storage_path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            logger.error("Failed to persist exclusions to %s: %s", self._storage_path, e)
