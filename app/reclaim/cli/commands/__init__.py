"""CLI commands for reclaim.

This package contains all subcommand implementations.
"""

from reclaim.cli.commands import clean, config, exclude, helper, scan

__all__ = ["clean", "config", "exclude", "helper", "scan"]
