"""Cooperative cancellation for long-running graph queries.

Queries never run on their own thread. Callers pass a cancel check -- any
zero-argument callable returning True once the query should stop -- and the
traversal polls it at every expansion step. ``CancellationToken`` is the
stock implementation: thread-safe, with an optional wall-clock deadline.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from refgraph.exceptions import QueryCancelledError

CancelCheck = Callable[[], bool]


def never_cancelled() -> bool:
    """Cancel check that never fires."""
    return False


def raise_if_cancelled(cancel_check: Optional[CancelCheck]) -> None:
    """Raise QueryCancelledError if *cancel_check* reports cancellation."""
    if cancel_check is not None and cancel_check():
        raise QueryCancelledError()


class CancellationToken:
    """Thread-safe cancellation signal.

    The token is itself a valid cancel check, so it can be handed straight
    to any query::

        token = CancellationToken.with_timeout(2.0)
        graph.branches_containing(commit_hash, cancel_check=token)

    Another thread (a UI, a signal handler) may call :meth:`cancel` at any
    time; the running query raises QueryCancelledError at its next step.
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Create a token that cancels itself *seconds* from now."""
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def __call__(self) -> bool:
        return self.cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
