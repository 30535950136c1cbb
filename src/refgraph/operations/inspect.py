"""Commit inspection for refgraph.

Composes the reachability queries into the structural summary a history
view shows for one commit: containing branches, tags on the commit, and the
nearest tags before and after it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from refgraph.cancel import raise_if_cancelled
from refgraph.exceptions import NotACommitError, ObjectMissingError
from refgraph.models.refs import RefKind
from refgraph.models.report import CommitReport
from refgraph.operations.containment import DEFAULT_FLAG_WIDTH, FlagPropagationEngine
from refgraph.operations.proximity import Direction, ProximityResolver

if TYPE_CHECKING:
    from refgraph.cancel import CancelCheck
    from refgraph.models.refs import RefEntry
    from refgraph.protocols import CommitGraphSource

logger = logging.getLogger(__name__)


def resolve_tips(
    source: CommitGraphSource,
    refs: Iterable[RefEntry],
    kind: RefKind | None = None,
) -> dict[str, str]:
    """Peel *refs* into a short label -> commit id mapping.

    Refs that denote a non-commit object are skipped silently; refs whose
    objects are missing are skipped with a warning. Neither fails the
    caller's query.

    Args:
        source: Graph source used for peeling.
        refs: Refs to resolve.
        kind: If set, only refs of this kind are resolved.
    """
    tips: dict[str, str] = {}
    for ref in refs:
        if kind is not None and ref.kind is not kind:
            continue
        try:
            tips[ref.short_name] = source.peel(ref)
        except NotACommitError as e:
            logger.debug("Skipping %s: %s", ref.name, e)
        except ObjectMissingError as e:
            logger.warning("Skipping unresolvable ref %s: %s", ref.name, e)
    return tips


def tags_at(commit_id: str, tag_tips: Mapping[str, str]) -> list[str]:
    """Labels of tags whose peeled target is *commit_id*, sorted."""
    return sorted(label for label, target in tag_tips.items() if target == commit_id)


def inspect_commit(
    source: CommitGraphSource,
    commit_id: str,
    refs: Iterable[RefEntry],
    cancel_check: CancelCheck | None = None,
    *,
    message: str | None = None,
    children: Iterable[str] = (),
    show_branches: bool = True,
    show_tag_sequence: bool = True,
    flag_width: int = DEFAULT_FLAG_WIDTH,
    strict: bool = False,
) -> CommitReport:
    """Build a CommitReport for *commit_id*.

    Args:
        source: Graph source.
        commit_id: Commit to inspect.
        refs: All refs (branches and tags) to consider.
        cancel_check: Polled throughout every sub-query.
        message: Commit message to carry into the report.
        children: Known child commits; the graph source only walks parents.
        show_branches: Compute the containing branches.
        show_tag_sequence: Compute the nearest preceding/following tags.
        flag_width: Bits per containment propagation pass.
        strict: Exact per-tip ancestry walks for containment.

    Raises:
        QueryCancelledError: cancel_check fired; no partial report.
    """
    raise_if_cancelled(cancel_check)
    refs = list(refs)
    parents = list(source.parents_of(commit_id))
    timestamp = source.timestamp_of(commit_id)
    tag_tips = resolve_tips(source, refs, RefKind.TAG)

    report = CommitReport(
        commit_id=commit_id,
        parents=parents,
        children=sorted(children),
        timestamp=timestamp,
        message=message,
        tags=tags_at(commit_id, tag_tips),
    )

    if show_branches:
        branch_tips = resolve_tips(source, refs, RefKind.BRANCH)
        engine = FlagPropagationEngine(source, flag_width=flag_width, strict=strict)
        report.branches = sorted(engine.branches_containing(commit_id, branch_tips, cancel_check))

    if show_tag_sequence:
        resolver = ProximityResolver(source)
        report.follows = resolver.nearest_tag(
            commit_id, Direction.PRECEDING, tag_tips, cancel_check
        )
        report.precedes = resolver.nearest_tag(
            commit_id, Direction.FOLLOWING, tag_tips, cancel_check
        )

    return report
