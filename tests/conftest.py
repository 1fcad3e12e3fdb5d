"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from reclaim.guard.path_guard import PathGuard
from reclaim.guard.safe_roots import SafePathFilter
from reclaim.preferences.store import MemoryExclusionStore
from reclaim.privilege.models import PrivilegedResult


class FakeChannel:
    """Privilege channel double returning a fixed result."""

    def __init__(self, result: PrivilegedResult) -> None:
        self.result = result
        self.calls: list[list[str]] = []

    def remove(self, paths: list[str]) -> PrivilegedResult:
        self.calls.append(list(paths))
        return self.result


@pytest.fixture
def make_channel() -> type[FakeChannel]:
    """Factory for privilege channel doubles."""
    return FakeChannel


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temporary location."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "reclaim"


@pytest.fixture
def exclusion_store() -> MemoryExclusionStore:
    """Empty in-memory exclusion store."""
    return MemoryExclusionStore()


@pytest.fixture
def guard(exclusion_store: MemoryExclusionStore) -> PathGuard:
    """Path guard backed by the in-memory store."""
    return PathGuard(exclusion_store)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory used as the only safe root in cleanup tests."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def safe_filter(guard: PathGuard, workspace: Path) -> SafePathFilter:
    """Safe-root filter trusting only the workspace."""
    return SafePathFilter(guard, [str(workspace)])
