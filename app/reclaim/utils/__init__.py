"""Utility modules for reclaim.

This module exports the subprocess helpers. Console output lives in
reclaim.utils.formatting.
"""

from reclaim.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "run_command",
]
