"""
Snapshot builder: turns extracted records into an enriched GraphSnapshot.

Every derived field of a snapshot (tags, metadata, layers, link properties,
connection strength, tag index) is produced here so that fresh fragments and
merged snapshots go through exactly the same enrichment.
"""

from datetime import datetime

from graphloom.config import PaletteConfig
from graphloom.core.enrichment.layers import LayerAssigner
from graphloom.core.enrichment.tags import TagMiner, clamp, mining_text, node_size
from graphloom.models.entity import Entity, ExtractedGraph
from graphloom.models.graph import (
    ByName,
    GraphLink,
    GraphNode,
    GraphSnapshot,
    Resolved,
)
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


def unique(items: list[str]) -> list[str]:
    """Drop duplicate strings, preserving first-seen order."""
    return list(dict.fromkeys(items))


class GraphBuilder:
    """
    Builds enriched snapshots.

    - enrich_node: observations + type -> tags, metadata, size, color
    - build: ExtractedGraph -> GraphSnapshot fragment
    - finalize: node set + links -> consistent GraphSnapshot
    """

    def __init__(
        self,
        miner: TagMiner | None = None,
        assigner: LayerAssigner | None = None,
        palette: PaletteConfig | None = None,
    ):
        """
        Initialize builder.

        Args:
            miner: Tag and importance miner
            assigner: Layer assignment engine
            palette: Presentation hints for nodes and links
        """
        self.palette = palette or PaletteConfig()
        self.miner = miner or TagMiner(palette=self.palette)
        self.assigner = assigner or LayerAssigner(palette=self.palette)

    def enrich_node(
        self,
        name: str,
        node_type: str,
        observations: list[str],
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> GraphNode:
        """
        Derive tags, metadata and size for a node.

        The node is not yet assigned to a layer.
        """
        tags = self.miner.mine(mining_text(name, observations), node_type)
        metadata = self.miner.build_metadata(
            observations, tags, created_at=created_at, updated_at=updated_at
        )
        return GraphNode(
            id=name,
            name=name,
            type=node_type,
            observations=list(observations),
            tags=tags,
            metadata=metadata,
            size=node_size(len(observations)),
            color=self.palette.node_color(node_type),
            tag_string=" ".join(tag.name for tag in tags),
        )

    def build(self, extracted: ExtractedGraph) -> GraphSnapshot:
        """
        Build a snapshot fragment from extracted records.

        Entities repeated within the payload are folded together and
        relations repeated by (source, target, relation_type) collapse to
        one. Relations that reference unknown entities are kept with
        unresolved endpoints; whether they are acceptable is decided when
        the fragment is merged.

        Args:
            extracted: Decoded tool output

        Returns:
            Enriched snapshot fragment
        """
        folded: dict[str, Entity] = {}
        for entity in extracted.entities:
            existing = folded.get(entity.name)
            if existing is None:
                folded[entity.name] = entity.model_copy(deep=True)
                continue
            existing.observations = unique([*existing.observations, *entity.observations])
            existing.type = existing.type or entity.type

        now = datetime.now()
        nodes = [
            self.enrich_node(
                entity.name, entity.type, unique(entity.observations), created_at=now, updated_at=now
            )
            for entity in folded.values()
        ]

        links: dict[tuple[str, str, str], GraphLink] = {}
        for relation in extracted.relations:
            links.setdefault(
                relation.key,
                GraphLink(
                    source=ByName(name=relation.source),
                    target=ByName(name=relation.target),
                    relation_type=relation.relation_type,
                ),
            )

        logger.debug(
            f"Building fragment: {len(nodes)} nodes, {len(links)} links",
            extra={
                "entities": len(extracted.entities),
                "relations": len(extracted.relations),
                "nodes": len(nodes),
                "links": len(links),
            },
        )
        return self.finalize(nodes, list(links.values()))

    def finalize(self, nodes: list[GraphNode], links: list[GraphLink]) -> GraphSnapshot:
        """
        Recompute every population-dependent field.

        Layers are regenerated, nodes reassigned, links resolved and
        re-derived, connection strength recounted and the tag index rebuilt.

        Args:
            nodes: Enriched nodes (layer assignment is ignored)
            links: Links to resolve against the nodes

        Returns:
            Snapshot; links whose endpoints are missing stay unresolved
        """
        layered, layers = self.assigner.apply(nodes)
        nodes_by_id = {node.id: node for node in layered}

        derived = [self.derive_link(link, nodes_by_id) for link in links]

        degree: dict[str, int] = {}
        for link in derived:
            for endpoint in {link.source_id, link.target_id}:
                degree[endpoint] = degree.get(endpoint, 0) + 1

        final_nodes = []
        for node in layered:
            metadata = node.metadata.model_copy(
                update={"connection_strength": clamp(degree.get(node.id, 0), 1, 10)}
            )
            final_nodes.append(node.model_copy(update={"metadata": metadata}))

        return GraphSnapshot(
            nodes=final_nodes,
            links=derived,
            layers=layers,
            tag_index=self.build_tag_index(final_nodes),
        )

    def derive_link(self, link: GraphLink, nodes_by_id: dict[str, GraphNode]) -> GraphLink:
        """
        Resolve a link's endpoints and derive its layer-aware properties.

        Args:
            link: Link with endpoints by name or already resolved
            nodes_by_id: Layered nodes of the snapshot being built

        Returns:
            New link; endpoints that do not resolve stay ByName
        """
        source = nodes_by_id.get(link.source_id)
        target = nodes_by_id.get(link.target_id)

        source_layer = source.layer_id if source else None
        target_layer = target.layer_id if target else None
        is_inter_layer = source_layer != target_layer

        shared: list[str] = []
        if source and target:
            target_tags = set(target.tag_names())
            shared = [name for name in source.tag_names() if name in target_tags]

        return GraphLink(
            source=Resolved(node_id=source.id) if source else ByName(name=link.source_id),
            target=Resolved(node_id=target.id) if target else ByName(name=link.target_id),
            relation_type=link.relation_type,
            is_inter_layer=is_inter_layer,
            strength=clamp(len(shared) + 3, 1, 10),
            tags=shared,
            color=(
                self.palette.inter_layer_link_color
                if is_inter_layer
                else self.palette.intra_layer_link_color
            ),
            width=(
                self.palette.inter_layer_link_width
                if is_inter_layer
                else self.palette.intra_layer_link_width
            ),
        )

    @staticmethod
    def build_tag_index(nodes: list[GraphNode]) -> dict[str, list[str]]:
        """Tag name -> IDs of nodes carrying it, rebuilt from scratch."""
        tag_index: dict[str, list[str]] = {}
        for node in nodes:
            for tag in node.tags:
                tag_index.setdefault(tag.name, []).append(node.id)
        return tag_index
