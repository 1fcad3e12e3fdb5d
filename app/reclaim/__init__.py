"""reclaim - guarded cleanup of caches, logs and temporary files.

Discovers reclaimable files, checks every candidate against a deletion
guard and escalates to administrator privilege only for paths a plain
removal cannot touch.
"""

__version__ = "0.1.0"
