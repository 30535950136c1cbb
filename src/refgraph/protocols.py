"""Protocol definitions for refgraph.

CommitGraphSource is the only collaborator the reachability core consumes.
Implementations own commit storage; the core only ever holds commit ids and
asks for expansion on demand.

No SQLAlchemy imports allowed in this module -- pure domain protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from refgraph.models.refs import RefEntry


@runtime_checkable
class CommitGraphSource(Protocol):
    """Read access to the commit DAG.

    Implementations may perform I/O. They must be safe for concurrent reads
    if queries are run from several threads against the same source.
    """

    def parents_of(self, commit_id: str) -> Sequence[str]:
        """Ordered parent ids of *commit_id* (first parent first).

        Raises:
            ObjectMissingError: The commit cannot be resolved.
            ObjectCorruptError: The stored parent data is malformed.
        """
        ...

    def timestamp_of(self, commit_id: str) -> int:
        """Creation time of *commit_id* in epoch seconds.

        Raises:
            ObjectMissingError: The commit cannot be resolved.
        """
        ...

    def peel(self, ref: RefEntry) -> str:
        """Resolve *ref* to the commit it ultimately denotes.

        Raises:
            NotACommitError: The ref denotes a tree, blob or other non-commit.
            ObjectMissingError: An object on the peel chain is absent.
        """
        ...
