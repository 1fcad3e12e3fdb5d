"""Privileged removal.

Removals that fail with a permission error are retried with
administrator rights: first through a root helper service, then through
an elevated shell command.
"""

from reclaim.privilege.cell import ResultCell
from reclaim.privilege.confirm import (
    ConfirmationRequest,
    Confirmer,
    MainThreadConfirmer,
    StaticConfirmer,
)
from reclaim.privilege.escalator import PrivilegeEscalator, sanitize_paths
from reclaim.privilege.fallback import AdminShellRemover
from reclaim.privilege.helper import HelperChannel, HelperConnection, PrivilegedChannel
from reclaim.privilege.models import FailureReason, PrivilegedResult, PrivilegedStatus

__all__ = [
    "AdminShellRemover",
    "ConfirmationRequest",
    "Confirmer",
    "FailureReason",
    "HelperChannel",
    "HelperConnection",
    "MainThreadConfirmer",
    "PrivilegeEscalator",
    "PrivilegedChannel",
    "PrivilegedResult",
    "PrivilegedStatus",
    "ResultCell",
    "StaticConfirmer",
    "sanitize_paths",
]
