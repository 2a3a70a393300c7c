"""
Snapshot cache keys, read strategies and metrics.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class CacheKey(str, Enum):
    """Logical names under which snapshots are cached."""

    FULL_GRAPH = "full_graph"
    FILTERED_GRAPH = "filtered_graph"
    SEARCH_RESULTS = "search_results"


class CacheStrategy(str, Enum):
    """Read policy for a cached value."""

    # Use cache if available
    CACHE_FIRST = "cache_first"
    # Always fetch fresh data
    NETWORK_FIRST = "network_first"
    # Use cache but refresh in background
    STALE_WHILE_REVALIDATE = "stale_while_revalidate"


class CacheMetrics(BaseModel):
    """Read-only view of the cache counters."""

    model_config = {"frozen": True}

    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    updates: int = Field(default=0, ge=0)
    discarded_writes: int = Field(default=0, ge=0)
    last_access: datetime | None = None
    size: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0)
