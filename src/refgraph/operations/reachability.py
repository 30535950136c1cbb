"""Pairwise reachability queries for refgraph.

is_ancestor answers "does *candidate* lie on some parent chain from *tip*"
with an early-terminating walk. No result is memoized across calls; callers
with many checks against one reference set should use the flag propagation
engine in containment.py instead.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from refgraph.cancel import raise_if_cancelled
from refgraph.operations.walker import GraphWalker

if TYPE_CHECKING:
    from refgraph.cancel import CancelCheck
    from refgraph.protocols import CommitGraphSource

logger = logging.getLogger(__name__)

# Commits on the ancestor path between two points. Rebuilt per query.
ReachabilitySet = frozenset[str]


class ReachabilityIndex:
    """Ancestor/descendant tests built on GraphWalker."""

    def __init__(self, source: CommitGraphSource) -> None:
        self._walker = GraphWalker(source)

    @property
    def source(self) -> CommitGraphSource:
        return self._walker.source

    def is_ancestor(
        self,
        candidate: str,
        tip: str,
        cancel_check: CancelCheck | None = None,
    ) -> bool:
        """Check if *candidate* is reachable from *tip* (True when equal).

        Walks backward from *tip* and stops as soon as *candidate* is
        visited, avoiding the cost of building the complete ancestor set.
        """
        raise_if_cancelled(cancel_check)
        for commit_id in self._walker.iter_commits([tip], cancel_check):
            if commit_id == candidate:
                return True
        return False

    def ancestors_of(
        self,
        commit_id: str,
        cancel_check: CancelCheck | None = None,
    ) -> ReachabilitySet:
        """All commits reachable from *commit_id*, itself included."""
        raise_if_cancelled(cancel_check)
        return frozenset(self._walker.iter_commits([commit_id], cancel_check))

    def commits_between(
        self,
        ancestor: str,
        descendant: str,
        cancel_check: CancelCheck | None = None,
    ) -> ReachabilitySet:
        """Commits on some parent path from *descendant* down to *ancestor*.

        Both endpoints are included. Empty if *ancestor* is not an ancestor
        of *descendant*.

        The walk from *descendant* records each commit's parents; the
        result is then everything in that subgraph from which *ancestor*
        can be reached, found by walking child edges up from *ancestor*.
        """
        raise_if_cancelled(cancel_check)
        source = self._walker.source
        children: dict[str, list[str]] = {}
        found = False
        walk = self._walker.iter_commits(
            [descendant], cancel_check, stop_at=frozenset([ancestor])
        )
        for commit_id in walk:
            if commit_id == ancestor:
                found = True
                continue
            for parent in source.parents_of(commit_id):
                children.setdefault(parent, []).append(commit_id)
        if not found:
            return frozenset()

        between: set[str] = {ancestor}
        queue: deque[str] = deque([ancestor])
        while queue:
            raise_if_cancelled(cancel_check)
            current = queue.popleft()
            for child in children.get(current, ()):
                if child not in between:
                    between.add(child)
                    queue.append(child)
        logger.debug(
            "%d commit(s) between %s and %s", len(between), ancestor[:8], descendant[:8]
        )
        return frozenset(between)


def is_ancestor(
    source: CommitGraphSource,
    candidate: str,
    tip: str,
    cancel_check: CancelCheck | None = None,
) -> bool:
    """Check if *candidate* is an ancestor of (or equal to) *tip*."""
    return ReachabilityIndex(source).is_ancestor(candidate, tip, cancel_check)
