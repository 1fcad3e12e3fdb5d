"""Administrator confirmation requests and confirmers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

CONFIRMATION_TITLE = "Administrator Access Required"


@dataclass(frozen=True, slots=True)
class ConfirmationRequest:
    """What the user is asked to approve before elevation.

    Attributes:
        paths: Sanitized paths that need administrator rights.
    """

    paths: tuple[str, ...]

    @property
    def title(self) -> str:
        """Dialog title."""
        return CONFIRMATION_TITLE

    @property
    def count(self) -> int:
        """Number of affected items."""
        return len(self.paths)

    @property
    def preview(self) -> str:
        """First path, with a count of the remainder."""
        if not self.paths:
            return ""
        if len(self.paths) == 1:
            return self.paths[0]
        return f"{self.paths[0]} and {len(self.paths) - 1} more items"

    @property
    def message(self) -> str:
        """Dialog body."""
        noun = "item" if self.count == 1 else "items"
        return (
            f"Administrator privileges are needed to remove {self.count} protected {noun}.\n"
            f"Affected: {self.preview}"
        )


class Confirmer(Protocol):
    """Asks the user to approve an elevation."""

    def confirm(self, request: ConfirmationRequest) -> bool: ...


class StaticConfirmer:
    """Confirmer with a fixed answer (non-interactive runs and tests).

    Args:
        answer: Value returned for every request.
    """

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.requests: list[ConfirmationRequest] = []

    def confirm(self, request: ConfirmationRequest) -> bool:
        self.requests.append(request)
        return self.answer


class MainThreadConfirmer:
    """Runs another confirmer on the event loop thread.

    Executors run in worker threads; prompts must be shown from the
    thread that owns the loop. Calls made on the loop thread itself are
    answered directly.

    Args:
        inner: Confirmer that interacts with the user.
        loop: Event loop whose thread owns the user interface.
    """

    def __init__(self, inner: Confirmer, loop: asyncio.AbstractEventLoop) -> None:
        self._inner = inner
        self._loop = loop

    def confirm(self, request: ConfirmationRequest) -> bool:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            return self._inner.confirm(request)

        future = asyncio.run_coroutine_threadsafe(self._ask(request), self._loop)
        return future.result()

    async def _ask(self, request: ConfirmationRequest) -> bool:
        return self._inner.confirm(request)
