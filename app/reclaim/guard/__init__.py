"""Deletion guard module.

This module classifies paths before any deletion, partitions batches
into permitted and excluded paths, and restricts cleanup to a fixed set
of recognized safe roots.
"""

from reclaim.guard.models import (
    ExcludedPathError,
    GuardDecision,
    GuardResult,
    GuardViolation,
    RestrictedPathError,
)
from reclaim.guard.path_guard import PathGuard, is_restricted, normalize_path
from reclaim.guard.safe_roots import SAFE_ROOT_PATTERNS, SafePathFilter, expand_safe_roots

__all__ = [
    "SAFE_ROOT_PATTERNS",
    "ExcludedPathError",
    "GuardDecision",
    "GuardResult",
    "GuardViolation",
    "PathGuard",
    "RestrictedPathError",
    "SafePathFilter",
    "expand_safe_roots",
    "is_restricted",
    "normalize_path",
]
