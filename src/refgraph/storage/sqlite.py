"""SQLite implementations of repository interfaces.

All repositories use SQLAlchemy 2.0-style queries (select() + session.execute()).
Each repository takes a Session in its constructor.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from refgraph.exceptions import AmbiguousPrefixError
from refgraph.models.refs import RefKind
from refgraph.storage.repositories import (
    CommitParentRepository,
    CommitRepository,
    RefRepository,
    TagObjectRepository,
)
from refgraph.storage.schema import CommitParentRow, CommitRow, RefRow, TagObjectRow


class SqliteCommitRepository(CommitRepository):
    """SQLite implementation of commit repository.

    Lookups by hash go through ``Session.get`` so repeated expansion of the
    same commit during a query is served from the identity map.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, commit_hash: str) -> CommitRow | None:
        return self._session.get(CommitRow, commit_hash)

    def save(self, commit: CommitRow) -> None:
        self._session.add(commit)
        self._session.flush()

    def get_by_prefix(self, prefix: str) -> CommitRow | None:
        if len(prefix) < 4:
            raise ValueError("Commit hash prefix must be at least 4 characters")

        stmt = select(CommitRow).where(CommitRow.commit_hash.startswith(prefix))
        results = list(self._session.execute(stmt).scalars().all())

        if len(results) == 0:
            return None
        if len(results) == 1:
            return results[0]
        raise AmbiguousPrefixError(prefix, [r.commit_hash for r in results])

    def get_children(self, commit_hash: str) -> Sequence[str]:
        first_parent = select(CommitRow.commit_hash).where(
            CommitRow.parent_hash == commit_hash
        )
        merge_parent = select(CommitParentRow.commit_hash).where(
            CommitParentRow.parent_hash == commit_hash
        )
        children = set(self._session.execute(first_parent).scalars().all())
        children.update(self._session.execute(merge_parent).scalars().all())
        return sorted(children)

    def count(self) -> int:
        return self._session.execute(select(func.count()).select_from(CommitRow)).scalar_one()


class SqliteCommitParentRepository(CommitParentRepository):
    """SQLite implementation of multi-parent commit storage."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_parent_rows(self, commit_hash: str) -> Sequence[CommitParentRow]:
        stmt = (
            select(CommitParentRow)
            .where(CommitParentRow.commit_hash == commit_hash)
            .order_by(CommitParentRow.position)
        )
        return list(self._session.execute(stmt).scalars().all())

    def add_parents(self, commit_hash: str, parent_hashes: list[str]) -> None:
        for i, ph in enumerate(parent_hashes):
            self._session.add(
                CommitParentRow(
                    commit_hash=commit_hash,
                    parent_hash=ph,
                    position=i,
                )
            )
        self._session.flush()


class SqliteTagObjectRepository(TagObjectRepository):
    """SQLite implementation of annotated tag storage."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, tag_hash: str) -> TagObjectRow | None:
        return self._session.get(TagObjectRow, tag_hash)

    def save(self, tag: TagObjectRow) -> None:
        self._session.add(tag)
        self._session.flush()


class SqliteRefRepository(RefRepository):
    """SQLite implementation of ref repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, ref_name: str) -> RefRow | None:
        return self._session.get(RefRow, ref_name)

    def set_ref(self, ref_name: str, target_hash: str, kind: RefKind) -> None:
        row = self.get(ref_name)
        if row is None:
            self._session.add(RefRow(ref_name=ref_name, target_hash=target_hash, kind=kind))
        else:
            row.target_hash = target_hash
            row.kind = kind
        self._session.flush()

    def delete(self, ref_name: str) -> bool:
        row = self.get(ref_name)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def list_refs(self, kind: RefKind | None = None) -> Sequence[RefRow]:
        stmt = select(RefRow).order_by(RefRow.ref_name)
        if kind is not None:
            stmt = stmt.where(RefRow.kind == kind)
        return list(self._session.execute(stmt).scalars().all())
