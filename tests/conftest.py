"""Shared test fixtures for refgraph.

Provides in-memory SQLite engine, session, and repository fixtures, plus
helpers for building small commit graphs by hand.
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session, sessionmaker

from refgraph.storage.engine import create_refgraph_engine, init_db
from refgraph.storage.memory import MemoryGraphSource
from refgraph.storage.source import RepositoryGraphSource
from refgraph.storage.sqlite import (
    SqliteCommitParentRepository,
    SqliteCommitRepository,
    SqliteRefRepository,
    SqliteTagObjectRepository,
)


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_refgraph_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def commit_repo(session: Session) -> SqliteCommitRepository:
    return SqliteCommitRepository(session)


@pytest.fixture
def parent_repo(session: Session) -> SqliteCommitParentRepository:
    return SqliteCommitParentRepository(session)


@pytest.fixture
def tag_repo(session: Session) -> SqliteTagObjectRepository:
    return SqliteTagObjectRepository(session)


@pytest.fixture
def ref_repo(session: Session) -> SqliteRefRepository:
    return SqliteRefRepository(session)


@pytest.fixture
def repo_source(commit_repo, parent_repo, tag_repo) -> RepositoryGraphSource:
    return RepositoryGraphSource(commit_repo, parent_repo, tag_repo)


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def build_graph(parents: dict[str, list[str]]) -> MemoryGraphSource:
    """Build a MemoryGraphSource from ``{commit: [parents]}``.

    Commits must be listed parents-first; timestamps follow insertion order,
    so every child is strictly newer than its parents.
    """
    graph = MemoryGraphSource()
    for ts, (commit_id, commit_parents) in enumerate(parents.items(), start=1):
        graph.add_commit(commit_id, commit_parents, timestamp=ts * 10)
    return graph


def linear_graph(n: int, prefix: str = "c") -> tuple[MemoryGraphSource, list[str]]:
    """Build a single chain c0 <- c1 <- ... <- c(n-1)."""
    ids = [f"{prefix}{i}" for i in range(n)]
    parents = {ids[0]: []}
    for i in range(1, n):
        parents[ids[i]] = [ids[i - 1]]
    return build_graph(parents), ids


class CancelAfter:
    """Cancel check that fires once it has been polled *n* times."""

    def __init__(self, n: int) -> None:
        self.n = n
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.calls > self.n


@pytest.fixture
def abc_graph() -> MemoryGraphSource:
    """A <- B <- C."""
    return build_graph({"A": [], "B": ["A"], "C": ["B"]})


@pytest.fixture
def merge_graph() -> MemoryGraphSource:
    """Diamond: R <- X, R <- Y, M merges X and Y; T on top of M."""
    return build_graph({
        "R": [],
        "X": ["R"],
        "Y": ["R"],
        "M": ["X", "Y"],
        "T": ["M"],
    })
