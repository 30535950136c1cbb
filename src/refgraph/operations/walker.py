"""Graph walking primitive for refgraph.

Breadth-first backward traversal over the commit DAG, following every
parent of merge commits. Each commit is visited at most once per walk, even
when diamond merges reach it through several paths.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from refgraph.cancel import raise_if_cancelled
from refgraph.exceptions import InvariantViolationError

if TYPE_CHECKING:
    from refgraph.cancel import CancelCheck
    from refgraph.protocols import CommitGraphSource

logger = logging.getLogger(__name__)


class WalkAction(str, enum.Enum):
    """What a visitor wants the walker to do next."""

    CONTINUE = "continue"
    STOP = "stop"


def _bfs_walk(
    source: CommitGraphSource,
    start_ids: Iterable[str],
    cancel_check: CancelCheck | None = None,
    *,
    stop_at: frozenset[str] | set[str] | None = None,
) -> Iterator[str]:
    """BFS walk from one or more start commits, yielding each commit once.

    A commit's parents are requested only after the consumer resumes the
    generator, so breaking out of the loop stops all further expansion.

    Args:
        source: Graph source used to expand commits.
        start_ids: Commits to start from. Duplicates are ignored.
        cancel_check: Polled before every expansion.
        stop_at: Commits that are yielded but whose parents are not
            enqueued.

    Raises:
        QueryCancelledError: cancel_check fired.
        InvariantViolationError: A commit is its own parent, or a
            single-start walk arrives back at its start commit.
    """
    starts = list(dict.fromkeys(start_ids))
    single_start = starts[0] if len(starts) == 1 else None

    visited: set[str] = set()
    queue: deque[str] = deque(starts)
    expanded = 0
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        yield current

        if stop_at is not None and current in stop_at:
            continue
        raise_if_cancelled(cancel_check)
        parents = source.parents_of(current)
        expanded += 1
        for parent in parents:
            if parent == current:
                raise InvariantViolationError(current, "commit is its own parent")
            if parent == single_start:
                raise InvariantViolationError(
                    current, f"walk from {single_start} reached its start again"
                )
            if parent not in visited:
                queue.append(parent)

    logger.debug("Walk from %d start(s) exhausted after %d expansions", len(starts), expanded)


class GraphWalker:
    """Lazy traversal over a CommitGraphSource.

    Frontier order is breadth-first from the start commits; callers should
    not rely on it beyond "every reachable commit is eventually visited".
    """

    def __init__(self, source: CommitGraphSource) -> None:
        self._source = source

    @property
    def source(self) -> CommitGraphSource:
        return self._source

    def iter_commits(
        self,
        start_ids: Iterable[str],
        cancel_check: CancelCheck | None = None,
        *,
        stop_at: frozenset[str] | set[str] | None = None,
    ) -> Iterator[str]:
        """Yield every commit reachable from *start_ids*, starts included.

        Parents of commits in *stop_at* are not explored.
        """
        return _bfs_walk(self._source, start_ids, cancel_check, stop_at=stop_at)

    def walk(
        self,
        start_ids: Iterable[str],
        visit: Callable[[str], WalkAction],
        cancel_check: CancelCheck | None = None,
    ) -> bool:
        """Call *visit* for every newly reached commit.

        Returns:
            True if the visitor stopped the walk, False if the frontier was
            exhausted.
        """
        walk = _bfs_walk(self._source, start_ids, cancel_check)
        try:
            for commit_id in walk:
                if visit(commit_id) is WalkAction.STOP:
                    return True
            return False
        finally:
            walk.close()
