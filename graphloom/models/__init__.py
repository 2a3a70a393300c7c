"""
Data models for GraphLoom.

Pipeline stages:
1. Tool output (ContentBlock, ToolResultBlock)
2. Raw graph records (Entity, Relation, ExtractedGraph)
3. Enriched graph (Tag, Layer, GraphNode, GraphLink, GraphSnapshot)
4. Cache and notifications (CacheKey, CacheStrategy, SnapshotReplaced, ...)
"""

from graphloom.models.blocks import (
    TEXT_BLOCK_TYPE,
    TOOL_RESULT_BLOCK_TYPE,
    ContentBlock,
    RawBlock,
    ToolResultBlock,
)
from graphloom.models.cache import CacheKey, CacheMetrics, CacheStrategy
from graphloom.models.entity import Entity, ExtractedGraph, Relation
from graphloom.models.events import NotificationKind, SnapshotReplaced, SubsetHighlighted
from graphloom.models.graph import (
    ByName,
    GraphLink,
    GraphNode,
    GraphSnapshot,
    Layer,
    LinkEndpoint,
    NodeMetadata,
    Resolved,
    Tag,
    TagCategory,
)
from graphloom.models.ingestion import IngestionResult, IngestionStatus
from graphloom.models.views import GraphFilterCriteria, LayerStatistics, NodeLookupResult

__all__ = [
    # Tool output
    "ContentBlock",
    "ToolResultBlock",
    "RawBlock",
    "TEXT_BLOCK_TYPE",
    "TOOL_RESULT_BLOCK_TYPE",
    # Raw graph records
    "Entity",
    "Relation",
    "ExtractedGraph",
    # Enriched graph
    "Tag",
    "TagCategory",
    "Layer",
    "NodeMetadata",
    "GraphNode",
    "ByName",
    "Resolved",
    "LinkEndpoint",
    "GraphLink",
    "GraphSnapshot",
    # Cache
    "CacheKey",
    "CacheStrategy",
    "CacheMetrics",
    # Notifications
    "NotificationKind",
    "SnapshotReplaced",
    "SubsetHighlighted",
    # Ingestion
    "IngestionResult",
    "IngestionStatus",
    # Views
    "GraphFilterCriteria",
    "LayerStatistics",
    "NodeLookupResult",
]
