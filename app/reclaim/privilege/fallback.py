"""Secondary privilege channel: an administrator-elevated shell command.

A single recursive force-remove over the shell-quoted path list is run
through the platform's elevation prompt (pkexec on Linux, osascript on
macOS). The outcome is read from the exit status and combined output.
"""

import logging
import shlex
import subprocess
import sys

from reclaim.privilege.models import FailureReason, PrivilegedResult
from reclaim.utils.shell import run_command

logger = logging.getLogger(__name__)

# Output fragments meaning the user dismissed the prompt (compared lower-cased)
CANCELLATION_MARKERS: tuple[str, ...] = (
    "user canceled",
    "request dismissed",
)


class AdminShellRemover:
    """Removes paths with an administrator-elevated ``rm -rf``.

    Args:
        platform: sys.platform value selecting the elevation mechanism.
    """

    def __init__(self, platform: str = sys.platform) -> None:
        self._platform = platform

    def build_command(self, paths: list[str]) -> list[str]:
        """Build the elevated command for a path list.

        Args:
            paths: Absolute paths to remove.

        Returns:
            argv for run_command().
        """
        shell_command = shlex.join(["rm", "-rf", "--", *paths])

        if self._platform == "darwin":
            escaped = shell_command.replace("\\", "\\\\").replace('"', '\\"')
            script = f'do shell script "{escaped}" with administrator privileges'
            return ["/usr/bin/osascript", "-e", script]

        return ["pkexec", "/bin/sh", "-c", shell_command]

    def remove(self, paths: list[str]) -> PrivilegedResult:
        """Remove paths through the elevation prompt.

        Args:
            paths: Absolute paths to remove.

        Returns:
            SUCCESS on exit 0, CANCELLED when the output carries a
            cancellation marker, FAILURE otherwise.
        """
        command = self.build_command(paths)
        logger.debug("Running elevated removal for %d path(s)", len(paths))

        try:
            result = run_command(command, timeout=None)
        except (FileNotFoundError, OSError, subprocess.SubprocessError) as e:
            return PrivilegedResult.failure(
                f"Unable to request administrator privileges: {e}",
                FailureReason.AUTHORIZATION,
            )

        if result.success:
            return PrivilegedResult.success()

        output = result.output
        lowered = output.lower()
        if any(marker in lowered for marker in CANCELLATION_MARKERS):
            return PrivilegedResult.cancelled()

        return PrivilegedResult.failure(output or "Administrator command failed.")
