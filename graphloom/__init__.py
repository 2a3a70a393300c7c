"""
GraphLoom - knowledge-graph ingestion, enrichment and sync engine.
"""

__version__ = "1.0.0"
