"""Configuration models for refgraph.

RefGraphConfig holds per-repository settings: where the commit store lives
and how the reachability queries trade speed against strictness.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RefGraphConfig(BaseModel):
    """Per-repository configuration."""

    db_path: str = ":memory:"
    db_url: Optional[str] = None
    # Bits per propagation pass; larger tip sets are processed in batches.
    flag_width: int = Field(default=64, ge=1)
    # Per-tip ancestry walks instead of timestamp-ordered flag propagation.
    strict_ancestry: bool = False
    max_peel_depth: int = Field(default=16, ge=1)
