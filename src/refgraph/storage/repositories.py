"""Abstract repository interfaces for refgraph storage.

Defines ABC interfaces for all database operations. No SQLAlchemy
imports here -- pure abstract contracts.

Concrete implementations are in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from refgraph.models.refs import RefKind
    from refgraph.storage.schema import CommitParentRow, CommitRow, RefRow, TagObjectRow


class CommitRepository(ABC):
    """Abstract interface for commit storage operations."""

    @abstractmethod
    def get(self, commit_hash: str) -> CommitRow | None:
        """Get a commit by its hash. Returns None if not found."""
        ...

    @abstractmethod
    def save(self, commit: CommitRow) -> None:
        """Save a commit to storage."""
        ...

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> CommitRow | None:
        """Find commit by hash prefix (min 4 chars).

        Raises AmbiguousPrefixError if multiple matches.
        Returns None if no match.
        """
        ...

    @abstractmethod
    def get_children(self, commit_hash: str) -> Sequence[str]:
        """Hashes of commits listing *commit_hash* as any of their parents."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored commits."""
        ...


class CommitParentRepository(ABC):
    """Abstract interface for multi-parent commit storage (merge commits)."""

    @abstractmethod
    def get_parent_rows(self, commit_hash: str) -> Sequence[CommitParentRow]:
        """Parent rows for a commit, ordered by position.

        Returns an empty sequence for non-merge commits.
        """
        ...

    @abstractmethod
    def add_parents(self, commit_hash: str, parent_hashes: list[str]) -> None:
        """Batch add parents for a commit. Position = list index."""
        ...


class TagObjectRepository(ABC):
    """Abstract interface for annotated tag objects."""

    @abstractmethod
    def get(self, tag_hash: str) -> TagObjectRow | None:
        """Get a tag object by hash. Returns None if not found."""
        ...

    @abstractmethod
    def save(self, tag: TagObjectRow) -> None:
        """Save a tag object."""
        ...


class RefRepository(ABC):
    """Abstract interface for named ref operations."""

    @abstractmethod
    def get(self, ref_name: str) -> RefRow | None:
        """Get a ref by its full name. Returns None if not found."""
        ...

    @abstractmethod
    def set_ref(self, ref_name: str, target_hash: str, kind: RefKind) -> None:
        """Create or move a ref."""
        ...

    @abstractmethod
    def delete(self, ref_name: str) -> bool:
        """Delete a ref. Returns True if it existed."""
        ...

    @abstractmethod
    def list_refs(self, kind: RefKind | None = None) -> Sequence[RefRow]:
        """All refs, optionally of one kind, ordered by name."""
        ...
