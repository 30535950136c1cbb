"""In-memory CommitGraphSource.

A dict-backed graph for callers that already hold their history in memory,
and for tests. Safe for concurrent reads once fully built.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from refgraph.exceptions import NotACommitError, ObjectCorruptError, ObjectMissingError
from refgraph.models.commit import CommitNode
from refgraph.models.refs import ObjectType

if TYPE_CHECKING:
    from refgraph.models.refs import RefEntry


class MemoryGraphSource:
    """Commit graph held in plain dicts.

    Example::

        graph = MemoryGraphSource()
        graph.add_commit("a", timestamp=1)
        graph.add_commit("b", ["a"], timestamp=2)
    """

    def __init__(
        self,
        commits: Iterable[CommitNode] = (),
        *,
        max_peel_depth: int = 16,
    ) -> None:
        self._commits: dict[str, CommitNode] = {}
        self._tags: dict[str, tuple[str, ObjectType]] = {}
        self._objects: dict[str, ObjectType] = {}
        self._max_peel_depth = max_peel_depth
        for node in commits:
            self.add_node(node)

    def add_node(self, node: CommitNode) -> CommitNode:
        self._commits[node.commit_id] = node
        return node

    def add_commit(
        self,
        commit_id: str,
        parents: Iterable[str] = (),
        *,
        timestamp: int,
        message: str | None = None,
    ) -> CommitNode:
        return self.add_node(
            CommitNode(
                commit_id=commit_id,
                parents=tuple(parents),
                timestamp=timestamp,
                message=message,
            )
        )

    def add_tag_object(self, tag_id: str, target: str, target_type: ObjectType) -> None:
        """Register an annotated tag object pointing at *target*."""
        self._tags[tag_id] = (target, ObjectType(target_type))

    def add_object(self, object_id: str, object_type: ObjectType) -> None:
        """Register a non-commit object (tree, blob) so refs to it peel cleanly."""
        self._objects[object_id] = ObjectType(object_type)

    def get(self, commit_id: str) -> CommitNode | None:
        return self._commits.get(commit_id)

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self._commits

    def __len__(self) -> int:
        return len(self._commits)

    def _node(self, commit_id: str) -> CommitNode:
        node = self._commits.get(commit_id)
        if node is None:
            raise ObjectMissingError(commit_id)
        return node

    def parents_of(self, commit_id: str) -> tuple[str, ...]:
        return self._node(commit_id).parents

    def timestamp_of(self, commit_id: str) -> int:
        return self._node(commit_id).timestamp

    def peel(self, ref: RefEntry) -> str:
        if ref.peeled is not None:
            return ref.peeled

        object_id = ref.target
        for _ in range(self._max_peel_depth):
            if object_id in self._commits:
                return object_id
            if object_id in self._objects:
                raise NotACommitError(ref.name, object_id, self._objects[object_id].value)
            if object_id not in self._tags:
                raise ObjectMissingError(object_id)
            target, target_type = self._tags[object_id]
            if target_type not in (ObjectType.COMMIT, ObjectType.TAG):
                raise NotACommitError(ref.name, target, target_type.value)
            object_id = target
        raise ObjectCorruptError(
            ref.target, f"tag chain longer than {self._max_peel_depth} objects"
        )
