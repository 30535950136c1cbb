"""Commit domain model for refgraph.

CommitNode is the immutable node of the ancestry graph: an id, its ordered
parents and a creation timestamp. The timestamp is only ever used as a
traversal-ordering heuristic.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, model_validator


class CommitNode(BaseModel):
    """A commit in the ancestry DAG.

    ``parents`` is empty for a root, has one entry for a normal commit and
    two or more for a merge. Position 0 is the first parent.
    """

    model_config = {"frozen": True}

    commit_id: str
    parents: tuple[str, ...] = ()
    timestamp: int
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_parents(self) -> CommitNode:
        if self.commit_id in self.parents:
            raise ValueError(f"commit {self.commit_id} lists itself as a parent")
        if len(set(self.parents)) != len(self.parents):
            raise ValueError(f"commit {self.commit_id} lists a parent more than once")
        return self

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def __str__(self) -> str:
        msg = self.message or ""
        if len(msg) > 60:
            msg = msg[:57] + "..."
        return f"{self.commit_id[:8]} {msg}".rstrip()
