"""Privilege escalation for removals the user cannot perform.

The escalator asks for a single confirmation, tries the helper service
first and falls back to an elevated shell command only when the helper
fails. A cancellation from either step ends the attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from reclaim.core.config import ReclaimConfig
from reclaim.core.diagnostics import (
    DiagnosticsCategory,
    DiagnosticsSeverity,
    DiagnosticsSink,
    emit,
)
from reclaim.privilege.confirm import ConfirmationRequest, Confirmer
from reclaim.privilege.fallback import AdminShellRemover
from reclaim.privilege.helper import HelperChannel, PrivilegedChannel
from reclaim.privilege.models import PrivilegedResult

logger = logging.getLogger(__name__)


def sanitize_paths(paths: Iterable[str]) -> list[str]:
    """Trim whitespace and drop empty entries, keeping order."""
    return [stripped for path in paths if (stripped := path.strip())]


class PrivilegeEscalator:
    """Removes paths with administrator rights.

    Args:
        confirmer: Asks the user to approve the elevation.
        primary: Preferred channel (the helper service).
        fallback: Channel used when the primary one fails.
        diagnostics: Optional event sink.
    """

    def __init__(
        self,
        confirmer: Confirmer,
        primary: PrivilegedChannel,
        fallback: PrivilegedChannel,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        self._confirmer = confirmer
        self._primary = primary
        self._fallback = fallback
        self._diagnostics = diagnostics

    @classmethod
    def from_config(
        cls,
        config: ReclaimConfig,
        confirmer: Confirmer,
        diagnostics: DiagnosticsSink | None = None,
    ) -> PrivilegeEscalator:
        """Build an escalator with the platform's channels."""
        primary = HelperChannel(
            socket_path=config.helper_socket,
            service=config.helper_service,
            timeout=config.helper_timeout_seconds,
        )
        return cls(confirmer, primary, AdminShellRemover(), diagnostics)

    def remove(self, paths: Iterable[str]) -> PrivilegedResult:
        """Remove paths after user confirmation.

        Args:
            paths: Paths needing elevation.

        Returns:
            SUCCESS (also for an empty list, without prompting),
            CANCELLED if the user declined, or the failing channel's
            FAILURE.
        """
        sanitized = sanitize_paths(paths)
        if not sanitized:
            return PrivilegedResult.success()

        request = ConfirmationRequest(paths=tuple(sanitized))
        if not self._confirmer.confirm(request):
            self._record(DiagnosticsSeverity.INFO, "Administrator prompt declined.", sanitized)
            return PrivilegedResult.cancelled()

        result = self._primary.remove(sanitized)
        if not result.is_failure:
            self._record_result(result, sanitized, channel="helper")
            return result

        logger.info("Helper removal failed (%s), using elevated shell", result.message)
        self._record(
            DiagnosticsSeverity.WARNING,
            "Privileged helper failed; falling back to administrator shell.",
            sanitized,
            reason=result.reason.value if result.reason else "",
            error=result.message or "",
        )

        fallback_result = self._fallback.remove(sanitized)
        self._record_result(fallback_result, sanitized, channel="shell")
        return fallback_result

    def _record_result(self, result: PrivilegedResult, paths: list[str], channel: str) -> None:
        if result.is_success:
            self._record(
                DiagnosticsSeverity.INFO,
                "Privileged removal succeeded.",
                paths,
                channel=channel,
            )
        elif result.is_cancelled:
            self._record(
                DiagnosticsSeverity.INFO,
                "Administrator authorization cancelled.",
                paths,
                channel=channel,
            )
        else:
            self._record(
                DiagnosticsSeverity.ERROR,
                "Privileged removal failed.",
                paths,
                channel=channel,
                error=result.message or "",
            )

    def _record(
        self,
        severity: DiagnosticsSeverity,
        message: str,
        paths: list[str],
        **metadata: str,
    ) -> None:
        emit(
            self._diagnostics,
            DiagnosticsCategory.PRIVILEGE,
            severity,
            message,
            count=str(len(paths)),
            **metadata,
        )
