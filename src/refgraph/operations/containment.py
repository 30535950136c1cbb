"""Branch containment by flag propagation.

Answers "which of these branch tips have *target* in their history" with one
combined traversal instead of one ancestry walk per tip. Every tip gets its
own bit; bits flow from children to parents, newest commit first, and the
bits that arrive at *target* name the branches containing it.

Commit timestamps order the traversal. A commit strictly older than the
target cannot be one of its descendants, so the walk ends once only such
commits remain queued. That shortcut trusts timestamps to be monotonic along
ancestry; with clock skew it may miss a branch. ``strict=True`` trades the
shortcut for one exact ancestry walk per tip.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from refgraph.cancel import raise_if_cancelled
from refgraph.exceptions import InvariantViolationError
from refgraph.operations.reachability import ReachabilityIndex

if TYPE_CHECKING:
    from refgraph.cancel import CancelCheck
    from refgraph.protocols import CommitGraphSource

logger = logging.getLogger(__name__)

DEFAULT_FLAG_WIDTH = 64


class _CommitArena:
    """Dense integer index for the commits touched by one propagation pass.

    Flags, timestamps and queue membership live in parallel lists keyed by
    the index, so the hot loop never hashes commit ids after first contact.
    """

    def __init__(self, source: CommitGraphSource) -> None:
        self._source = source
        self._index: dict[str, int] = {}
        self.ids: list[str] = []
        self.timestamps: list[int] = []
        self.flags: list[int] = []
        self.queued: list[bool] = []

    def index_of(self, commit_id: str) -> int:
        idx = self._index.get(commit_id)
        if idx is None:
            idx = len(self.ids)
            self._index[commit_id] = idx
            self.ids.append(commit_id)
            self.timestamps.append(self._source.timestamp_of(commit_id))
            self.flags.append(0)
            self.queued.append(False)
        return idx

    def __len__(self) -> int:
        return len(self.ids)


class FlagPropagationEngine:
    """Multi-source branch containment query.

    Args:
        source: Graph source to traverse.
        flag_width: Bits per propagation pass. Larger tip sets are split
            into batches whose results are unioned.
        strict: Use one exact ancestry walk per tip instead of the
            timestamp-ordered propagation.
    """

    def __init__(
        self,
        source: CommitGraphSource,
        *,
        flag_width: int = DEFAULT_FLAG_WIDTH,
        strict: bool = False,
    ) -> None:
        if flag_width < 1:
            raise ValueError("flag_width must be at least 1")
        self._source = source
        self._flag_width = flag_width
        self._strict = strict
        self._reachability = ReachabilityIndex(source)

    def branches_containing(
        self,
        target: str,
        branch_tips: Mapping[str, str],
        cancel_check: CancelCheck | None = None,
    ) -> set[str]:
        """Labels whose tip is a descendant of (or equal to) *target*.

        Args:
            target: Commit to look for.
            branch_tips: Label -> tip commit id.
            cancel_check: Polled at every dequeue / expansion.

        Returns:
            The containing labels, in no particular order.

        Raises:
            QueryCancelledError: cancel_check fired.
            ObjectMissingError, ObjectCorruptError: From the source.
            InvariantViolationError: A commit is its own parent.
        """
        raise_if_cancelled(cancel_check)
        if not branch_tips:
            return set()

        if self._strict:
            return {
                label
                for label, tip in branch_tips.items()
                if self._reachability.is_ancestor(target, tip, cancel_check)
            }

        labels = list(branch_tips)
        result: set[str] = set()
        for start in range(0, len(labels), self._flag_width):
            batch = labels[start:start + self._flag_width]
            result.update(self._propagate(target, batch, branch_tips, cancel_check))
        if len(labels) > self._flag_width:
            logger.debug(
                "Containment of %s: %d tips in %d batches",
                target[:8],
                len(labels),
                -(-len(labels) // self._flag_width),
            )
        return result

    def _propagate(
        self,
        target: str,
        labels: Sequence[str],
        branch_tips: Mapping[str, str],
        cancel_check: CancelCheck | None,
    ) -> set[str]:
        source = self._source
        arena = _CommitArena(source)
        target_idx = arena.index_of(target)
        target_ts = arena.timestamps[target_idx]
        all_flags = (1 << len(labels)) - 1

        # (-timestamp, insertion order, index): newest first, FIFO on ties
        heap: list[tuple[int, int, int]] = []
        sequence = itertools.count()

        def push(idx: int) -> None:
            heapq.heappush(heap, (-arena.timestamps[idx], next(sequence), idx))
            arena.queued[idx] = True

        # Tips sharing a commit are merged into one queue entry.
        for bit, label in enumerate(labels):
            idx = arena.index_of(branch_tips[label])
            arena.flags[idx] |= 1 << bit
            if not arena.queued[idx]:
                push(idx)

        expansions = 0
        while heap:
            raise_if_cancelled(cancel_check)
            neg_ts, _, idx = heap[0]
            if -neg_ts < target_ts:
                break
            heapq.heappop(heap)
            arena.queued[idx] = False

            if idx == target_idx:
                if arena.flags[idx] == all_flags:
                    break
                # Ancestors of the target cannot carry flags back to it.
                continue

            flags = arena.flags[idx]
            commit_id = arena.ids[idx]
            expansions += 1
            for parent in source.parents_of(commit_id):
                if parent == commit_id:
                    raise InvariantViolationError(commit_id, "commit is its own parent")
                p = arena.index_of(parent)
                if arena.timestamps[p] < target_ts:
                    continue
                if arena.flags[p] | flags == arena.flags[p]:
                    continue
                arena.flags[p] |= flags
                if not arena.queued[p]:
                    push(p)

        found = arena.flags[target_idx]
        logger.debug(
            "Propagated %d flag(s) to %s: %d commits indexed, %d expansions",
            len(labels),
            target[:8],
            len(arena),
            expansions,
        )
        return {label for bit, label in enumerate(labels) if found >> bit & 1}


def branches_containing(
    source: CommitGraphSource,
    target: str,
    branch_tips: Mapping[str, str],
    cancel_check: CancelCheck | None = None,
    *,
    flag_width: int = DEFAULT_FLAG_WIDTH,
    strict: bool = False,
) -> set[str]:
    """Labels in *branch_tips* whose tip has *target* in its history."""
    engine = FlagPropagationEngine(source, flag_width=flag_width, strict=strict)
    return engine.branches_containing(target, branch_tips, cancel_check)
