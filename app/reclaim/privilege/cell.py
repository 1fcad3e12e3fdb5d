"""One-shot result cell shared by racing callbacks."""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class ResultCell(Generic[T]):
    """Holds the first value written to it; later writes are discarded.

    A reply callback, error callbacks and a timeout can all race to
    resolve the same request. Resolution is guarded by a lock so exactly
    one of them wins regardless of thread scheduling.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resolved = threading.Event()
        self._value: T | None = None

    def resolve(self, value: T) -> bool:
        """Store a value if the cell is still empty.

        Args:
            value: Candidate result.

        Returns:
            True if this call won, False if a value was already stored.
        """
        with self._lock:
            if self._resolved.is_set():
                return False
            self._value = value
            self._resolved.set()
            return True

    def wait(self, timeout: float | None = None) -> T | None:
        """Block until resolved or the timeout elapses.

        Args:
            timeout: Seconds to wait, or None to wait forever.

        Returns:
            The stored value, or None if the wait timed out.
        """
        if not self._resolved.wait(timeout):
            return None
        return self._value

    @property
    def is_resolved(self) -> bool:
        """Check if a value has been stored."""
        return self._resolved.is_set()

    @property
    def value(self) -> T | None:
        """Stored value, or None if unresolved."""
        with self._lock:
            return self._value
