"""Result model for privileged removal.

Cancellation is a routine outcome distinct from failure, so results are
a three-way status rather than an exception hierarchy.
"""

from dataclasses import dataclass
from enum import Enum


class PrivilegedStatus(str, Enum):
    """Outcome of a privileged removal attempt.

    Attributes:
        SUCCESS: All paths were removed.
        CANCELLED: The user declined or dismissed an administrator prompt.
        FAILURE: The removal could not be completed.
    """

    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILURE = "failure"


class FailureReason(str, Enum):
    """Why a privileged removal failed.

    Attributes:
        UNAVAILABLE: The privileged helper is missing or could not start.
        AUTHORIZATION: Administrator authorization could not be obtained.
        TIMEOUT: The helper did not reply in time.
        CHANNEL: The IPC or shell channel reported an error.
    """

    UNAVAILABLE = "unavailable"
    AUTHORIZATION = "authorization"
    TIMEOUT = "timeout"
    CHANNEL = "channel"


@dataclass(frozen=True, slots=True)
class PrivilegedResult:
    """Result of a privileged removal.

    Attributes:
        status: Three-way outcome.
        message: Failure description (None unless status is FAILURE).
        reason: Failure classification (None unless status is FAILURE).
    """

    status: PrivilegedStatus
    message: str | None = None
    reason: FailureReason | None = None

    @classmethod
    def success(cls) -> "PrivilegedResult":
        """Create a success result."""
        return cls(status=PrivilegedStatus.SUCCESS)

    @classmethod
    def cancelled(cls) -> "PrivilegedResult":
        """Create a cancelled result."""
        return cls(status=PrivilegedStatus.CANCELLED)

    @classmethod
    def failure(
        cls, message: str, reason: FailureReason = FailureReason.CHANNEL
    ) -> "PrivilegedResult":
        """Create a failure result.

        Args:
            message: Human-readable failure description.
            reason: Failure classification.
        """
        return cls(status=PrivilegedStatus.FAILURE, message=message, reason=reason)

    @property
    def is_success(self) -> bool:
        """Check if the removal succeeded."""
        return self.status == PrivilegedStatus.SUCCESS

    @property
    def is_cancelled(self) -> bool:
        """Check if the user cancelled."""
        return self.status == PrivilegedStatus.CANCELLED

    @property
    def is_failure(self) -> bool:
        """Check if the removal failed."""
        return self.status == PrivilegedStatus.FAILURE
