"""
Enriched graph models: tags, layers, nodes, links and snapshots.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from graphloom.utils.keys import link_key


class TagCategory(str, Enum):
    """Where a tag came from."""

    HASHTAG = "hashtag"  # Explicit marker in the text
    TYPE = "type"  # Derived from the node type
    KEYWORD = "keyword"  # Mined from the text


class Tag(BaseModel):
    """Categorical label on a node with an importance weight."""

    name: str
    category: TagCategory
    weight: int = Field(default=5, ge=1, le=10)
    color: str | None = None


class Layer(BaseModel):
    """Cluster of nodes sharing a high-weight tag, ordered by depth."""

    id: str
    name: str
    depth: float = 0.0
    member_tag_names: list[str] = Field(default_factory=list)
    color: str | None = None
    node_count: int = Field(default=0, ge=0)
    visible: bool = True
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)


class NodeMetadata(BaseModel):
    """Derived node metadata."""

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    importance: int = Field(default=1, ge=1, le=10)
    keywords: list[str] = Field(default_factory=list)
    connection_strength: int = Field(default=1, ge=1, le=10)


class GraphNode(BaseModel):
    """Enriched entity. Identity is the entity name."""

    id: str
    name: str
    type: str = ""
    observations: list[str] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    metadata: NodeMetadata = Field(default_factory=NodeMetadata)
    layer_id: str | None = None
    size: int = 5
    color: str | None = None
    tag_string: str = ""

    def tag_names(self) -> list[str]:
        return [tag.name for tag in self.tags]


class ByName(BaseModel):
    """Link endpoint that has not been resolved against a node set."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["by_name"] = "by_name"
    name: str

    @property
    def ref(self) -> str:
        return self.name


class Resolved(BaseModel):
    """Link endpoint resolved to a node present in the same snapshot."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved"] = "resolved"
    node_id: str

    @property
    def ref(self) -> str:
        return self.node_id


LinkEndpoint = Annotated[ByName | Resolved, Field(discriminator="kind")]


class GraphLink(BaseModel):
    """Enriched relation. Identity is (source, target, relation_type)."""

    source: LinkEndpoint
    target: LinkEndpoint
    relation_type: str
    is_inter_layer: bool = False
    strength: int = Field(default=3, ge=1, le=10)
    tags: list[str] = Field(default_factory=list)
    color: str | None = None
    width: int = 2

    @property
    def source_id(self) -> str:
        return self.source.ref

    @property
    def target_id(self) -> str:
        return self.target.ref

    @property
    def key(self) -> tuple[str, str, str]:
        return link_key(self.source.ref, self.target.ref, self.relation_type)

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.source, Resolved) and isinstance(self.target, Resolved)


class GraphSnapshot(BaseModel):
    """
    Complete graph state at one point in time.

    Invariants:
    - every link endpoint names a node in `nodes`
    - `tag_index` is derivable from `nodes` alone
    """

    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)
    layers: list[Layer] = Field(default_factory=list)
    tag_index: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "GraphSnapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.links

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_layer(self, layer_id: str) -> Layer | None:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def dangling_links(self) -> list[tuple[str, str, str]]:
        """Link keys whose source or target is not a node of this snapshot."""
        node_ids = self.node_ids()
        return [
            link.key
            for link in self.links
            if link.source_id not in node_ids or link.target_id not in node_ids
        ]
