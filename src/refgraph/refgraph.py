"""RefGraph -- the user-facing entry point.

Owns the storage engine and session, offers helpers to record a history
(commits, branches, tags) and exposes the reachability queries against it.
Query methods accept revisions (hashes, unique prefixes, ref names) and
default their tip sets to the refs stored in the database.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from refgraph.exceptions import NotACommitError, RefExistsError, RefNotFoundError
from refgraph.hashing import commit_hash as compute_commit_hash
from refgraph.hashing import tag_hash as compute_tag_hash
from refgraph.models.commit import CommitNode
from refgraph.models.config import RefGraphConfig
from refgraph.models.refs import R_HEADS, R_TAGS, ObjectType, RefEntry, RefKind
from refgraph.operations.containment import FlagPropagationEngine
from refgraph.operations.inspect import inspect_commit, resolve_tips, tags_at
from refgraph.operations.proximity import Direction, ProximityResolver
from refgraph.operations.reachability import ReachabilityIndex
from refgraph.operations.refs import resolve_revision, to_ref_entry, validate_ref_name
from refgraph.storage.engine import create_refgraph_engine, create_session_factory, init_db
from refgraph.storage.schema import CommitRow, TagObjectRow
from refgraph.storage.source import RepositoryGraphSource
from refgraph.storage.sqlite import (
    SqliteCommitParentRepository,
    SqliteCommitRepository,
    SqliteRefRepository,
    SqliteTagObjectRepository,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from refgraph.cancel import CancelCheck
    from refgraph.models.report import CommitReport
    from refgraph.operations.reachability import ReachabilitySet

logger = logging.getLogger(__name__)


class RefGraph:
    """A commit ancestry graph with named refs.

    Example::

        with RefGraph.open() as g:
            a = g.commit(message="root")
            b = g.commit([a], message="second")
            g.set_branch("main", b)
            g.create_tag("v1", a)
            g.branches_containing(a)        # {"main"}
            g.nearest_tag(b, "preceding")   # "v1"
    """

    def __init__(
        self,
        *,
        engine: Engine | None,
        session: Session,
        config: RefGraphConfig,
    ) -> None:
        self._engine = engine
        self._session = session
        self._config = config
        self._closed = False

        self._commit_repo = SqliteCommitRepository(session)
        self._parent_repo = SqliteCommitParentRepository(session)
        self._tag_repo = SqliteTagObjectRepository(session)
        self._ref_repo = SqliteRefRepository(session)
        self._source = RepositoryGraphSource(
            self._commit_repo,
            self._parent_repo,
            self._tag_repo,
            max_peel_depth=config.max_peel_depth,
        )

    @classmethod
    def open(
        cls,
        path: str = ":memory:",
        *,
        config: RefGraphConfig | None = None,
    ) -> RefGraph:
        """Open (or create) a refgraph database.

        Args:
            path: SQLite path.  ``":memory:"`` for in-memory (default).
            config: Configuration.  Defaults created if *None*; when given,
                its ``db_url`` takes precedence over *path*.

        Returns:
            A ready-to-use ``RefGraph`` instance.
        """
        if config is None:
            config = RefGraphConfig(db_path=path)

        engine = create_refgraph_engine(config.db_path, url=config.db_url)
        init_db(engine)
        session = create_session_factory(engine)()
        return cls(engine=engine, session=session, config=config)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> RefGraphConfig:
        return self._config

    @property
    def source(self) -> RepositoryGraphSource:
        """The CommitGraphSource view of this database."""
        return self._source

    # ------------------------------------------------------------------
    # Recording history
    # ------------------------------------------------------------------

    def commit(
        self,
        parents: Iterable[str] = (),
        *,
        message: str | None = None,
        timestamp: int | None = None,
    ) -> str:
        """Record a commit and return its hash.

        Args:
            parents: Parent revisions, first parent first.
            message: Optional commit message.
            timestamp: Creation time in epoch seconds.  Defaults to now.
        """
        parent_hashes = [self.resolve(p) for p in parents]
        if timestamp is None:
            timestamp = int(time.time())
        # Validates parent/self consistency before anything is written.
        node = CommitNode(
            commit_id=compute_commit_hash(parent_hashes, timestamp, message),
            parents=tuple(parent_hashes),
            timestamp=timestamp,
            message=message,
        )
        if self._commit_repo.get(node.commit_id) is not None:
            return node.commit_id

        try:
            self._commit_repo.save(
                CommitRow(
                    commit_hash=node.commit_id,
                    parent_hash=parent_hashes[0] if parent_hashes else None,
                    committed_at=timestamp,
                    message=message,
                )
            )
            if node.is_merge:
                self._parent_repo.add_parents(node.commit_id, parent_hashes)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return node.commit_id

    def get_commit(self, rev: str) -> CommitNode:
        """Load a commit as a CommitNode.

        Raises:
            RefNotFoundError: *rev* does not resolve.
        """
        commit_id = self.resolve(rev)
        row = self._commit_repo.get(commit_id)
        if row is None:
            raise RefNotFoundError(rev)
        return CommitNode(
            commit_id=row.commit_hash,
            parents=tuple(self._source.parents_of(commit_id)),
            timestamp=row.committed_at,
            message=row.message,
        )

    def children_of(self, rev: str) -> list[str]:
        """Hashes of the commits that list *rev* as a parent."""
        return list(self._commit_repo.get_children(self.resolve(rev)))

    def set_branch(self, name: str, target: str) -> RefEntry:
        """Create or move branch *name* to the commit *target* resolves to."""
        validate_ref_name(name)
        commit_id = self.resolve(target)
        ref_name = R_HEADS + name
        self._ref_repo.set_ref(ref_name, commit_id, RefKind.BRANCH)
        self._session.commit()
        return RefEntry.branch(ref_name, commit_id)

    def create_tag(
        self,
        name: str,
        target: str,
        *,
        message: str | None = None,
        annotated: bool = False,
        target_type: ObjectType = ObjectType.COMMIT,
        force: bool = False,
    ) -> RefEntry:
        """Create tag *name*.

        Args:
            name: Short tag name.
            target: Revision to tag.  For non-commit *target_type* the raw
                object id is used as-is.
            message: Tag message; implies an annotated tag.
            annotated: Store an annotated tag object between ref and target.
            target_type: Type of the tagged object.  Anything but COMMIT
                requires an annotated tag.
            force: Move an existing tag instead of failing.

        Raises:
            RefExistsError: The tag exists and *force* is False.
        """
        validate_ref_name(name)
        ref_name = R_TAGS + name
        if not force and self._ref_repo.get(ref_name) is not None:
            raise RefExistsError(ref_name)

        target_type = ObjectType(target_type)
        object_id = self.resolve(target) if target_type is ObjectType.COMMIT else target
        if message is not None or target_type is not ObjectType.COMMIT:
            annotated = True

        ref_target = object_id
        if annotated:
            ref_target = compute_tag_hash(ref_name, object_id, target_type.value, message)
            if self._tag_repo.get(ref_target) is None:
                self._tag_repo.save(
                    TagObjectRow(
                        tag_hash=ref_target,
                        target_hash=object_id,
                        target_type=target_type,
                        message=message,
                    )
                )
        self._ref_repo.set_ref(ref_name, ref_target, RefKind.TAG)
        self._session.commit()
        return RefEntry.tag(ref_name, ref_target)

    def delete_ref(self, name: str) -> None:
        """Delete a ref by full or short name (branches are tried first).

        Raises:
            RefNotFoundError: No such ref.
        """
        candidates = [name] if name.startswith("refs/") else [R_HEADS + name, R_TAGS + name]
        for ref_name in candidates:
            if self._ref_repo.delete(ref_name):
                self._session.commit()
                return
        raise RefNotFoundError(name)

    def list_refs(self, kind: RefKind | None = None) -> list[RefEntry]:
        """All stored refs (optionally of one kind), ordered by name."""
        return [to_ref_entry(row) for row in self._ref_repo.list_refs(kind)]

    def resolve(self, rev: str) -> str:
        """Resolve a revision to a commit hash, peeling tags.

        Raises:
            RefNotFoundError: Nothing matches *rev*.
            AmbiguousPrefixError: A prefix matches several commits.
            NotACommitError: *rev* names a tag on a non-commit object.
        """
        object_id = resolve_revision(rev, self._commit_repo, self._ref_repo)
        return self._source.peel(RefEntry(name=rev, target=object_id, kind=RefKind.TAG))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _tips(self, kind: RefKind, tips: Mapping[str, str] | None) -> dict[str, str]:
        if tips is None:
            return resolve_tips(self._source, self.list_refs(kind))
        resolved: dict[str, str] = {}
        for label, rev in tips.items():
            try:
                resolved[label] = self.resolve(rev)
            except NotACommitError as e:
                logger.debug("Skipping %s: %s", label, e)
        return resolved

    def is_ancestor(
        self,
        candidate: str,
        tip: str,
        cancel_check: CancelCheck | None = None,
    ) -> bool:
        """True if *candidate* is *tip* or one of its ancestors."""
        return ReachabilityIndex(self._source).is_ancestor(
            self.resolve(candidate), self.resolve(tip), cancel_check
        )

    def commits_between(
        self,
        ancestor: str,
        descendant: str,
        cancel_check: CancelCheck | None = None,
    ) -> ReachabilitySet:
        """Commits on the ancestry paths from *descendant* down to *ancestor*."""
        return ReachabilityIndex(self._source).commits_between(
            self.resolve(ancestor), self.resolve(descendant), cancel_check
        )

    def branches_containing(
        self,
        rev: str,
        branches: Mapping[str, str] | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> set[str]:
        """Labels of branches whose history contains *rev*.

        Args:
            rev: Commit to look for.
            branches: Label -> revision.  Defaults to all stored branches,
                labelled by short name.
            cancel_check: Cooperative cancellation signal.
        """
        engine = FlagPropagationEngine(
            self._source,
            flag_width=self._config.flag_width,
            strict=self._config.strict_ancestry,
        )
        return engine.branches_containing(
            self.resolve(rev), self._tips(RefKind.BRANCH, branches), cancel_check
        )

    def nearest_tag(
        self,
        rev: str,
        direction: Direction | str,
        tags: Mapping[str, str] | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> str | None:
        """Label of the closest tag before or after *rev*, or None.

        Args:
            rev: Commit to search from.
            direction: ``"preceding"`` (ancestors) or ``"following"``
                (descendants).
            tags: Label -> revision.  Defaults to all stored tags whose
                targets peel to commits, labelled by short name.
            cancel_check: Cooperative cancellation signal.
        """
        return ProximityResolver(self._source).nearest_tag(
            self.resolve(rev), Direction(direction), self._tips(RefKind.TAG, tags), cancel_check
        )

    def tags_at(self, rev: str) -> list[str]:
        """Short names of the tags that peel to *rev*."""
        return tags_at(self.resolve(rev), self._tips(RefKind.TAG, None))

    def inspect(
        self,
        rev: str,
        cancel_check: CancelCheck | None = None,
        *,
        show_branches: bool = True,
        show_tag_sequence: bool = True,
    ) -> CommitReport:
        """Structural summary of *rev*: branches, tags, nearest tags."""
        commit_id = self.resolve(rev)
        row = self._commit_repo.get(commit_id)
        return inspect_commit(
            self._source,
            commit_id,
            self.list_refs(),
            cancel_check,
            message=row.message if row is not None else None,
            children=self._commit_repo.get_children(commit_id),
            show_branches=show_branches,
            show_tag_sequence=show_tag_sequence,
            flag_width=self._config.flag_width,
            strict=self._config.strict_ancestry,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the session and dispose the engine."""
        if self._closed:
            return
        self._closed = True
        self._session.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> RefGraph:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._closed:
            return "RefGraph(closed=True)"
        return f"RefGraph(db_path='{self._config.db_path}', commits={self._commit_repo.count()})"
