"""refgraph: branch containment and nearest-tag queries over a commit DAG.

Answers which branches have a commit in their history and which tags lie
closest before and after it, with bounded, cancellable traversals.
"""

from refgraph._version import __version__

# Core entry point
from refgraph.refgraph import RefGraph

# Domain models
from refgraph.models.commit import CommitNode
from refgraph.models.config import RefGraphConfig
from refgraph.models.refs import ObjectType, RefEntry, RefKind
from refgraph.models.report import CommitReport

# Protocols and sources
from refgraph.protocols import CommitGraphSource
from refgraph.storage.memory import MemoryGraphSource
from refgraph.storage.source import RepositoryGraphSource

# Cancellation
from refgraph.cancel import CancelCheck, CancellationToken, never_cancelled

# Queries
from refgraph.operations.walker import GraphWalker, WalkAction
from refgraph.operations.reachability import ReachabilityIndex, ReachabilitySet, is_ancestor
from refgraph.operations.containment import FlagPropagationEngine, branches_containing
from refgraph.operations.proximity import Direction, ProximityResolver, nearest_tag
from refgraph.operations.inspect import inspect_commit, resolve_tips, tags_at

# Exceptions
from refgraph.exceptions import (
    AmbiguousPrefixError,
    InvalidRefNameError,
    InvariantViolationError,
    NotACommitError,
    ObjectCorruptError,
    ObjectMissingError,
    QueryCancelledError,
    RefExistsError,
    RefGraphError,
    RefNotFoundError,
)

__all__ = [
    "__version__",
    "RefGraph",
    "CommitNode",
    "RefGraphConfig",
    "ObjectType",
    "RefEntry",
    "RefKind",
    "CommitReport",
    "CommitGraphSource",
    "MemoryGraphSource",
    "RepositoryGraphSource",
    "CancelCheck",
    "CancellationToken",
    "never_cancelled",
    "GraphWalker",
    "WalkAction",
    "ReachabilityIndex",
    "ReachabilitySet",
    "is_ancestor",
    "FlagPropagationEngine",
    "branches_containing",
    "Direction",
    "ProximityResolver",
    "nearest_tag",
    "inspect_commit",
    "resolve_tips",
    "tags_at",
    "AmbiguousPrefixError",
    "InvalidRefNameError",
    "InvariantViolationError",
    "NotACommitError",
    "ObjectCorruptError",
    "ObjectMissingError",
    "QueryCancelledError",
    "RefExistsError",
    "RefGraphError",
    "RefNotFoundError",
]
