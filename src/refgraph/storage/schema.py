"""SQLAlchemy ORM schema for refgraph.

Defines all database tables: commits, commit_parents, tag_objects, refs,
_refgraph_meta.

RefKind and ObjectType enums are imported from the domain models -- they
are NOT redefined here. The ORM uses the same Python enums.

Parent columns carry no foreign keys: a shallow import may reference
parents that were never stored, which queries report as missing objects.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from refgraph.models.refs import ObjectType, RefKind


class Base(DeclarativeBase):
    """Base class for all refgraph ORM models."""

    pass


class CommitRow(Base):
    """A commit in the ancestry DAG."""

    __tablename__ = "commits"

    commit_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    parent_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    committed_at: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_commits_parent", "parent_hash"),
        Index("ix_commits_time", "committed_at"),
    )


class CommitParentRow(Base):
    """Association table for multi-parent commits (merge commits).

    For non-merge commits, only CommitRow.parent_hash is used (single parent).
    For merge commits, this table stores ALL parents (including the first).
    The 'position' column preserves parent ordering; position 0 must agree
    with CommitRow.parent_hash.
    """

    __tablename__ = "commit_parents"

    commit_hash: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("commits.commit_hash"),
        primary_key=True,
    )
    parent_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_commit_parents_commit", "commit_hash"),
    )


class TagObjectRow(Base):
    """An annotated tag object.

    Points at any object; tags of tags are peeled repeatedly until a
    non-tag object is reached.
    """

    __tablename__ = "tag_objects"

    tag_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    target_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[ObjectType] = mapped_column(nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class RefRow(Base):
    """Named pointer to an object (branch or tag).

    Branches are stored as ref_name="refs/heads/{name}", tags as
    ref_name="refs/tags/{name}".
    """

    __tablename__ = "refs"

    ref_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    target_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[RefKind] = mapped_column(nullable=False)

    __table_args__ = (
        Index("ix_refs_kind", "kind"),
    )


class RefGraphMetaRow(Base):
    """Key-value metadata (schema version)."""

    __tablename__ = "_refgraph_meta"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
