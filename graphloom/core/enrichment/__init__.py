"""
Enrichment pipeline.

- TagMiner: typed, weighted tags and importance from node text
- LayerAssigner: layer discovery and node assignment
- GraphBuilder: enriched, layered snapshots
"""

from graphloom.core.enrichment.builder import GraphBuilder
from graphloom.core.enrichment.layers import LayerAssigner
from graphloom.core.enrichment.tags import TagMiner

__all__ = [
    "TagMiner",
    "LayerAssigner",
    "GraphBuilder",
]
