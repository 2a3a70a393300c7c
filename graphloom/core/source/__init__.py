"""
Graph source abstraction for the remote graph-memory service.

Available sources:
- HttpGraphSource: relay endpoint over HTTP (httpx)
- InMemoryGraphSource: fixed in-memory graph
"""

from graphloom.core.source.base import GraphSource
from graphloom.core.source.http import HttpGraphSource
from graphloom.core.source.memory import InMemoryGraphSource

__all__ = [
    "GraphSource",
    "HttpGraphSource",
    "InMemoryGraphSource",
]
