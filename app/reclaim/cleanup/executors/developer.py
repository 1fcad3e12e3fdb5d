"""Package manager caches and build artifacts."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from reclaim.cleanup.base import GuardedRemovalExecutor
from reclaim.cleanup.discovery import directory_size, is_hidden
from reclaim.cleanup.models import CleanupCategory, CleanupItem, CleanupReason, CleanupStep

if TYPE_CHECKING:
    from reclaim.core.diagnostics import DiagnosticsSink
    from reclaim.guard.path_guard import PathGuard
    from reclaim.privilege.escalator import PrivilegeEscalator

# (path relative to home, display name)
ARTIFACT_TARGETS: list[tuple[str, str]] = [
    (".cache/pip", "pip cache"),
    (".npm/_cacache", "npm cache"),
    (".cargo/registry/cache", "Cargo registry cache"),
    (".gradle/caches", "Gradle caches"),
    (".m2/repository", "Maven repository"),
]

XCODE_TARGETS: list[tuple[str, str]] = [
    ("Library/Developer/Xcode/DerivedData", "Xcode DerivedData"),
    ("Library/Developer/Xcode/Archives", "Xcode Archives"),
]


class DeveloperArtifactExecutor(GuardedRemovalExecutor):
    """Removes well-known build caches recursively.

    Args:
        guard: Deletion guard.
        escalator: Escalator for paths needing administrator rights.
        diagnostics: Optional event sink.
        home: Home directory override.
        platform: sys.platform value; Xcode locations are added on macOS.
        targets: (relative path, name) pairs replacing the defaults.
    """

    item_label = ("developer artifact", "developer artifacts")

    def __init__(
        self,
        guard: PathGuard,
        escalator: PrivilegeEscalator,
        diagnostics: DiagnosticsSink | None = None,
        *,
        home: Path | None = None,
        platform: str = sys.platform,
        targets: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(guard, escalator, diagnostics)
        self._home = home if home is not None else Path.home()
        if targets is not None:
            self._targets = list(targets)
        else:
            self._targets = ARTIFACT_TARGETS + (XCODE_TARGETS if platform == "darwin" else [])

    @property
    def step(self) -> CleanupStep:
        return CleanupStep.DEVELOPER_ARTIFACTS

    def scan(self) -> CleanupCategory:
        items: list[CleanupItem] = []
        for relative, name in self._targets:
            path = os.path.join(self._home, relative)
            if not os.path.isdir(path) or os.path.islink(path):
                continue
            try:
                count = sum(1 for entry in os.listdir(path) if not is_hidden(entry))
            except OSError:
                count = 0
            detail = "Empty" if count == 0 else f"{count} top-level items"
            items.append(
                CleanupItem(
                    path=path,
                    name=name,
                    size=directory_size(path),
                    detail=detail,
                    reasons=(CleanupReason("artifact", "Regenerated by the build tool", detail),),
                )
            )
        return CleanupCategory(step=self.step, items=tuple(items))
