"""CommitGraphSource backed by the storage repositories.

Adapts the commit, parent and tag repositories to the read-only interface
the reachability core consumes. Merge parents come from the commit_parents
table and are checked against the commit's stored first parent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from refgraph.exceptions import NotACommitError, ObjectCorruptError, ObjectMissingError
from refgraph.models.refs import ObjectType

if TYPE_CHECKING:
    from refgraph.models.refs import RefEntry
    from refgraph.storage.repositories import (
        CommitParentRepository,
        CommitRepository,
        TagObjectRepository,
    )
    from refgraph.storage.schema import CommitRow

DEFAULT_MAX_PEEL_DEPTH = 16


class RepositoryGraphSource:
    """Read-only graph view over the storage repositories.

    Not thread-safe: it shares the repositories' SQLAlchemy session. Give
    each thread its own session and source to run queries concurrently.
    """

    def __init__(
        self,
        commit_repo: CommitRepository,
        parent_repo: CommitParentRepository,
        tag_repo: TagObjectRepository,
        *,
        max_peel_depth: int = DEFAULT_MAX_PEEL_DEPTH,
    ) -> None:
        self._commit_repo = commit_repo
        self._parent_repo = parent_repo
        self._tag_repo = tag_repo
        self._max_peel_depth = max_peel_depth

    def _get_commit(self, commit_id: str) -> CommitRow:
        row = self._commit_repo.get(commit_id)
        if row is None:
            raise ObjectMissingError(commit_id)
        return row

    def parents_of(self, commit_id: str) -> tuple[str, ...]:
        row = self._get_commit(commit_id)
        parent_rows = self._parent_repo.get_parent_rows(commit_id)
        if not parent_rows:
            return (row.parent_hash,) if row.parent_hash else ()

        positions = [p.position for p in parent_rows]
        if positions != list(range(len(parent_rows))):
            raise ObjectCorruptError(
                commit_id, f"parent positions {positions} are not contiguous from 0"
            )
        if parent_rows[0].parent_hash != row.parent_hash:
            raise ObjectCorruptError(
                commit_id,
                f"first parent {row.parent_hash} disagrees with merge parent "
                f"{parent_rows[0].parent_hash}",
            )
        return tuple(p.parent_hash for p in parent_rows)

    def timestamp_of(self, commit_id: str) -> int:
        return self._get_commit(commit_id).committed_at

    def peel(self, ref: RefEntry) -> str:
        if ref.peeled is not None:
            return ref.peeled

        object_id = ref.target
        for _ in range(self._max_peel_depth):
            if self._commit_repo.get(object_id) is not None:
                return object_id
            tag = self._tag_repo.get(object_id)
            if tag is None:
                raise ObjectMissingError(object_id)
            if tag.target_type not in (ObjectType.COMMIT, ObjectType.TAG):
                raise NotACommitError(ref.name, tag.target_hash, tag.target_type.value)
            object_id = tag.target_hash
        raise ObjectCorruptError(
            ref.target, f"tag chain longer than {self._max_peel_depth} objects"
        )
