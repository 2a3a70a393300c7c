"""Graph merge engine."""

from graphloom.core.merge.merger import GraphMerger

__all__ = [
    "GraphMerger",
]
