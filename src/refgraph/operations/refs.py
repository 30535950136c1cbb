"""Ref operations for refgraph.

Validate ref names, resolve revisions to commit hashes, and convert stored
ref rows into RefEntry values for the query layer.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from refgraph.exceptions import InvalidRefNameError, RefNotFoundError
from refgraph.models.refs import R_HEADS, R_TAGS, RefEntry

if TYPE_CHECKING:
    from refgraph.storage.repositories import CommitRepository, RefRepository
    from refgraph.storage.schema import RefRow


# Characters forbidden in ref names (git-style)
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\]")


def validate_ref_name(name: str) -> None:
    """Validate a short ref name against git-style naming rules.

    Raises InvalidRefNameError on violation.
    """
    if not name:
        raise InvalidRefNameError(name, "ref name cannot be empty")

    if ".." in name:
        raise InvalidRefNameError(name, "ref name cannot contain '..'")

    if name.endswith(".lock"):
        raise InvalidRefNameError(name, "ref name cannot end with '.lock'")

    if name.startswith("."):
        raise InvalidRefNameError(name, "ref name cannot start with '.'")

    if name.endswith("."):
        raise InvalidRefNameError(name, "ref name cannot end with '.'")

    if _FORBIDDEN_CHARS.search(name):
        raise InvalidRefNameError(
            name, "ref name contains forbidden characters (whitespace, ~, ^, :, ?, *, [, \\)"
        )

    if name.startswith("/") or name.endswith("/") or "//" in name:
        raise InvalidRefNameError(name, "ref name has invalid slash usage")

    if name == "HEAD" or name.startswith("refs/"):
        raise InvalidRefNameError(name, "ref name must be a short name, not a full ref path")


def to_ref_entry(row: RefRow) -> RefEntry:
    return RefEntry(name=row.ref_name, target=row.target_hash, kind=row.kind)


def resolve_revision(
    rev: str,
    commit_repo: CommitRepository,
    ref_repo: RefRepository,
) -> str:
    """Resolve a revision string to a full object hash.

    Resolution order:
    1. Full commit hash (exact match)
    2. Full ref name (refs/...)
    3. Branch name (refs/heads/{name})
    4. Tag name (refs/tags/{name}) -- the ref target, not yet peeled
    5. Hash prefix (min 4 chars, via get_by_prefix)

    Raises:
        RefNotFoundError: If nothing matches.
        AmbiguousPrefixError: If a prefix matches multiple commits.
    """
    # 1. Exact commit hash
    row = commit_repo.get(rev)
    if row is not None:
        return row.commit_hash

    # 2-4. Ref names
    for ref_name in (rev, R_HEADS + rev, R_TAGS + rev):
        ref = ref_repo.get(ref_name)
        if ref is not None:
            return ref.target_hash

    # 5. Hash prefix (min 4 chars)
    if len(rev) >= 4:
        row = commit_repo.get_by_prefix(rev)
        if row is not None:
            return row.commit_hash

    raise RefNotFoundError(rev)
