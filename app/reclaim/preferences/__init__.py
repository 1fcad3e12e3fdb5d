"""User preferences consumed by the deletion guard."""

from reclaim.preferences.store import (
    DeletionPreferences,
    ExclusionStore,
    MemoryExclusionStore,
    TomlExclusionStore,
)

__all__ = [
    "DeletionPreferences",
    "ExclusionStore",
    "MemoryExclusionStore",
    "TomlExclusionStore",
]
