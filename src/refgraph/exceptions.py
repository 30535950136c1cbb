"""refgraph exception hierarchy.

All refgraph-specific exceptions inherit from RefGraphError.
"""

from __future__ import annotations


class RefGraphError(Exception):
    """Base exception for all refgraph errors."""


class ObjectMissingError(RefGraphError):
    """Raised when a commit or tag object cannot be resolved."""

    def __init__(self, object_id: str) -> None:
        self.object_id = object_id
        super().__init__(f"Object not found: {object_id}")


class ObjectCorruptError(RefGraphError):
    """Raised when stored object data is malformed."""

    def __init__(self, object_id: str, reason: str) -> None:
        self.object_id = object_id
        self.reason = reason
        super().__init__(f"Object {object_id} is corrupt: {reason}")


class NotACommitError(RefGraphError):
    """Raised when a ref peels to something other than a commit.

    Proximity and containment callers treat this as "not a candidate" and
    skip the ref rather than failing the query.
    """

    def __init__(self, ref_name: str, object_id: str, object_type: str) -> None:
        self.ref_name = ref_name
        self.object_id = object_id
        self.object_type = object_type
        super().__init__(
            f"Ref '{ref_name}' points at a {object_type} ({object_id}), not a commit"
        )


class QueryCancelledError(RefGraphError):
    """Raised when a query is aborted through its cancel check."""

    def __init__(self, message: str = "Query cancelled") -> None:
        super().__init__(message)


class InvariantViolationError(RefGraphError):
    """Raised when traversal detects a cycle or self-parentage.

    Indicates a corrupt graph. Never tolerated silently.
    """

    def __init__(self, commit_id: str, reason: str) -> None:
        self.commit_id = commit_id
        self.reason = reason
        super().__init__(f"Graph invariant violated at {commit_id}: {reason}")


class AmbiguousPrefixError(RefGraphError):
    """Raised when a commit hash prefix matches multiple commits."""

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        self.prefix = prefix
        self.candidates = candidates
        candidate_str = ", ".join(c[:12] + "..." for c in candidates[:5])
        super().__init__(
            f"Ambiguous prefix '{prefix}'. Matches: {candidate_str}"
        )


class RefNotFoundError(RefGraphError):
    """Raised when a ref or revision lookup fails."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Ref not found: {name}")


class RefExistsError(RefGraphError):
    """Raised when creating a ref that already exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Ref already exists: {name}")


class InvalidRefNameError(RefGraphError):
    """Raised when a ref name violates naming rules."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid ref name '{name}': {reason}")
