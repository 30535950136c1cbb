"""Commit inspection report model.

CommitReport is what ``RefGraph.inspect()`` returns: the structural facts a
history view shows next to a commit.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CommitReport(BaseModel):
    """Structural summary of one commit.

    ``branches`` and the tag-sequence fields are None when the corresponding
    section was not requested, and empty / None when requested but nothing
    qualified.
    """

    commit_id: str
    parents: list[str] = []
    children: list[str] = []
    timestamp: int
    message: Optional[str] = None
    tags: list[str] = []
    branches: Optional[list[str]] = None
    follows: Optional[str] = None  # nearest preceding tag
    precedes: Optional[str] = None  # nearest following tag
