"""Thread-safe fractional progress counter."""

import threading
from collections.abc import Callable

ProgressCallback = Callable[[float], None]


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Limit a value to [lower, upper]."""
    return max(lower, min(upper, value))


class ProgressTracker:
    """Counts completed units against a growing total.

    Executors may discover more work than the nominal item count (for
    example the children of a cache directory) and register it as
    additional units. Reported fractions are always within [0, 1].

    Args:
        initial_total: Nominal number of units; values below 1 count as 1.
    """

    def __init__(self, initial_total: int) -> None:
        self._lock = threading.Lock()
        self._total = float(max(initial_total, 1))
        self._completed = 0.0

    @property
    def fraction(self) -> float:
        """Current completion fraction."""
        with self._lock:
            return clamp(self._completed / self._total)

    def register_additional_units(
        self, units: int, update: ProgressCallback | None = None
    ) -> float:
        """Grow the total by ``units``.

        Args:
            units: Units to add; non-positive values are ignored.
            update: Called with the new fraction.

        Returns:
            The new fraction.
        """
        if units <= 0:
            return self.fraction
        with self._lock:
            self._total += units
            progress = clamp(self._completed / self._total)
        if update is not None:
            update(progress)
        return progress

    def advance(self, units: int = 1, update: ProgressCallback | None = None) -> float:
        """Mark ``units`` as completed.

        Args:
            units: Units completed; non-positive values are ignored.
            update: Called with the new fraction.

        Returns:
            The new fraction.
        """
        if units <= 0:
            return self.fraction
        with self._lock:
            self._completed += units
            self._total = max(self._total, self._completed)
            progress = clamp(self._completed / self._total)
        if update is not None:
            update(progress)
        return progress
