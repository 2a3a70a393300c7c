"""
Derived views over a snapshot: filters, lookups and layer statistics.
"""

from pydantic import BaseModel, Field

from graphloom.models.graph import GraphNode


class GraphFilterCriteria(BaseModel):
    """Node filter. Empty criteria keep everything; set criteria must all match."""

    model_config = {"extra": "ignore"}

    tags: list[str] = Field(default_factory=list, description="Keep nodes carrying any of these tags")
    types: list[str] = Field(default_factory=list, description="Keep nodes of these types")
    layers: list[str] = Field(default_factory=list, description="Keep nodes in these layer IDs")
    search_query: str = Field(default="", description="Case-insensitive text match")

    @property
    def is_empty(self) -> bool:
        return not (self.tags or self.types or self.layers or self.search_query.strip())


class LayerStatistics(BaseModel):
    """Node and connection counts for one layer."""

    layer_id: str
    name: str
    depth: float
    node_count: int = 0
    connection_count: int = 0
    inter_layer_connection_count: int = 0


class NodeLookupResult(BaseModel):
    """Nodes found by name plus the link keys to highlight."""

    nodes: list[GraphNode] = Field(default_factory=list)
    highlighted_links: list[str] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]
