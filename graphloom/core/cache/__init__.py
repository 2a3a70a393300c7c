"""
Snapshot cache.

Holds the latest snapshot per logical key with expiry, version stamps and
three read strategies (cache_first, network_first, stale_while_revalidate).
"""

from graphloom.core.cache.snapshot_cache import CacheEntry, SnapshotCache

__all__ = [
    "SnapshotCache",
    "CacheEntry",
]
