"""
Factory modules for creating GraphLoom components.
"""

from graphloom.core.factory.source_factory import SourceFactory

__all__ = [
    "SourceFactory",
]
