"""
Services for GraphLoom.

High-level services:
- GraphEngine: Unified interface for loading, looking up and ingesting graphs
- GraphFilter: Filtered sub-snapshots and layer statistics
- UpdateNotifier: Snapshot and highlight notifications to observers
"""

from graphloom.services.graph_engine import GraphEngine
from graphloom.services.graph_filter import GraphFilter
from graphloom.services.notifier import GraphObserver, QueueObserver, UpdateNotifier

__all__ = [
    "GraphEngine",
    "GraphFilter",
    "GraphObserver",
    "QueueObserver",
    "UpdateNotifier",
]
