"""Nearest-tag resolution for refgraph.

Finds the tagged commit closest to a target along ancestry edges, either
before it (an ancestor) or after it (a descendant).
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from refgraph.cancel import raise_if_cancelled
from refgraph.operations.reachability import ReachabilityIndex

if TYPE_CHECKING:
    from refgraph.cancel import CancelCheck
    from refgraph.protocols import CommitGraphSource

logger = logging.getLogger(__name__)


class Direction(str, enum.Enum):
    """Which side of the target to search."""

    PRECEDING = "preceding"  # tags on ancestors
    FOLLOWING = "following"  # tags on descendants

    def __str__(self) -> str:
        return self.value


class ProximityResolver:
    """Nearest qualifying tag in one direction.

    Candidates are scanned in ascending label order. The first qualifying
    candidate becomes the best; a later one replaces it only if it lies
    strictly between the best and the target. Every scan therefore ends on
    a candidate with no qualifying candidate strictly closer. When two
    closest tags sit on diverged lines of history, the one the scan settles
    on first wins -- deterministic, but not a ranking of the two.
    """

    def __init__(self, source: CommitGraphSource) -> None:
        self._reachability = ReachabilityIndex(source)

    def nearest_tag(
        self,
        target: str,
        direction: Direction,
        tag_tips: Mapping[str, str],
        cancel_check: CancelCheck | None = None,
    ) -> str | None:
        """Label of the closest tag in *direction*, or None.

        Args:
            target: Commit to search from.
            direction: PRECEDING searches ancestors, FOLLOWING descendants.
            tag_tips: Label -> peeled commit id. Tags on *target* itself
                are ignored; of several labels on one commit the first in
                label order is kept.
            cancel_check: Polled before every candidate and at every step
                of each ancestry walk.

        Raises:
            QueryCancelledError: cancel_check fired.
            ObjectMissingError, ObjectCorruptError: From the source.
        """
        direction = Direction(direction)
        raise_if_cancelled(cancel_check)

        candidates: dict[str, str] = {}  # commit -> first label
        for label in sorted(tag_tips):
            commit_id = tag_tips[label]
            if commit_id == target:
                continue
            candidates.setdefault(commit_id, label)

        best: str | None = None
        for commit_id in candidates:
            raise_if_cancelled(cancel_check)
            if not self._qualifies(commit_id, target, direction, cancel_check):
                continue
            if best is None or self._is_closer(commit_id, best, direction, cancel_check):
                best = commit_id

        if best is None:
            logger.debug("No %s tag for %s among %d candidates", direction, target[:8], len(candidates))
            return None
        return candidates[best]

    def _qualifies(
        self,
        candidate: str,
        target: str,
        direction: Direction,
        cancel_check: CancelCheck | None,
    ) -> bool:
        if direction is Direction.PRECEDING:
            return self._reachability.is_ancestor(candidate, target, cancel_check)
        return self._reachability.is_ancestor(target, candidate, cancel_check)

    def _is_closer(
        self,
        candidate: str,
        best: str,
        direction: Direction,
        cancel_check: CancelCheck | None,
    ) -> bool:
        # Both qualify, so whichever lies between the other and the target
        # is closer. Distinct commits, hence "between" is strict.
        if direction is Direction.PRECEDING:
            return self._reachability.is_ancestor(best, candidate, cancel_check)
        return self._reachability.is_ancestor(candidate, best, cancel_check)


def nearest_tag(
    source: CommitGraphSource,
    target: str,
    direction: Direction,
    tag_tips: Mapping[str, str],
    cancel_check: CancelCheck | None = None,
) -> str | None:
    """Label of the tag closest to *target* in *direction*, or None."""
    return ProximityResolver(source).nearest_tag(target, direction, tag_tips, cancel_check)
