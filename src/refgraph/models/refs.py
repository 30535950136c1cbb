"""Ref domain model for refgraph.

A RefEntry is a named pointer into the object store. Branches always point
at commits. Tags may point at a commit directly (lightweight tag) or at an
annotated tag object that has to be peeled, possibly through several tag
objects, before the denoted commit is known.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel

R_HEADS = "refs/heads/"
R_REMOTES = "refs/remotes/"
R_TAGS = "refs/tags/"


class RefKind(str, enum.Enum):
    """Kind of named reference."""

    BRANCH = "branch"
    TAG = "tag"

    def __str__(self) -> str:
        return self.value


class ObjectType(str, enum.Enum):
    """Type of an object a ref or tag object can point at."""

    COMMIT = "commit"
    TAG = "tag"
    TREE = "tree"
    BLOB = "blob"

    def __str__(self) -> str:
        return self.value


class RefEntry(BaseModel):
    """A named reference: ``name`` -> ``target`` of a given ``kind``.

    ``peeled`` carries the commit a tag ultimately denotes when that is
    already known (e.g. from a packed-refs style listing). It is always None
    for branches.
    """

    model_config = {"frozen": True}

    name: str
    target: str
    kind: RefKind
    peeled: Optional[str] = None

    @classmethod
    def branch(cls, name: str, target: str) -> RefEntry:
        if not name.startswith("refs/"):
            name = R_HEADS + name
        return cls(name=name, target=target, kind=RefKind.BRANCH)

    @classmethod
    def tag(cls, name: str, target: str, peeled: str | None = None) -> RefEntry:
        if not name.startswith("refs/"):
            name = R_TAGS + name
        return cls(name=name, target=target, kind=RefKind.TAG, peeled=peeled)

    @property
    def is_branch(self) -> bool:
        return self.kind is RefKind.BRANCH

    @property
    def is_tag(self) -> bool:
        return self.kind is RefKind.TAG

    @property
    def short_name(self) -> str:
        """Name with the ``refs/heads/``, ``refs/remotes/`` or ``refs/tags/`` prefix removed."""
        return shorten_ref_name(self.name)


def shorten_ref_name(name: str) -> str:
    for prefix in (R_HEADS, R_REMOTES, R_TAGS):
        if name.startswith(prefix):
            return name[len(prefix):]
    return name
