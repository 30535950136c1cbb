"""Deterministic hashing utilities for refgraph.

Commit and tag ids are content-derived: SHA-256 over a canonical JSON
serialization of the identity-relevant fields. Same input always produces
the same id, regardless of dict key ordering.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json(data: Any) -> bytes:
    """Serialize data to canonical JSON bytes.

    Uses sorted keys, compact separators, and UTF-8 encoding
    to ensure deterministic output.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def commit_hash(
    parents: list[str] | tuple[str, ...],
    timestamp: int,
    message: str | None = None,
) -> str:
    """Compute the SHA-256 id of a commit.

    Parent order is part of the identity: swapping the parents of a merge
    yields a different commit.
    """
    data: dict[str, Any] = {
        "kind": "commit",
        "parents": list(parents),
        "timestamp": timestamp,
    }
    if message is not None:
        data["message"] = message
    return hashlib.sha256(canonical_json(data)).hexdigest()


def tag_hash(name: str, target: str, target_type: str, message: str | None = None) -> str:
    """Compute the SHA-256 id of an annotated tag object."""
    data: dict[str, Any] = {
        "kind": "tag",
        "name": name,
        "target": target,
        "target_type": target_type,
    }
    if message is not None:
        data["message"] = message
    return hashlib.sha256(canonical_json(data)).hexdigest()
