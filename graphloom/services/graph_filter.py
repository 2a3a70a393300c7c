"""
Snapshot views: tag/type/layer/text filtering and per-layer statistics.

Filtered snapshots keep the invariants of a full snapshot: links are kept
only when both endpoints survive, and the tag index is rebuilt from the
surviving nodes.
"""

from graphloom.core.enrichment.builder import GraphBuilder
from graphloom.models.graph import GraphNode, GraphSnapshot
from graphloom.models.views import GraphFilterCriteria, LayerStatistics
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


class GraphFilter:
    """Builds filtered sub-snapshots and layer statistics."""

    def filter(self, snapshot: GraphSnapshot, criteria: GraphFilterCriteria) -> GraphSnapshot:
        """
        Filter a snapshot.

        Layers keep the depth ordering of the full graph; their node counts
        are recounted over the surviving nodes.

        Args:
            snapshot: Full snapshot
            criteria: Filter criteria

        Returns:
            Consistent sub-snapshot
        """
        if criteria.is_empty:
            return snapshot.model_copy(deep=True)

        nodes = [node for node in snapshot.nodes if self._matches(node, criteria)]
        kept = {node.id for node in nodes}
        links = [
            link for link in snapshot.links if link.source_id in kept and link.target_id in kept
        ]

        layers = [layer.model_copy(update={"node_count": 0}) for layer in snapshot.layers]
        layers_by_id = {layer.id: layer for layer in layers}
        for node in nodes:
            layer = layers_by_id.get(node.layer_id)
            if layer is not None:
                layer.node_count += 1

        logger.debug(
            f"Filtered snapshot to {len(nodes)}/{len(snapshot.nodes)} nodes",
            extra={"kept_nodes": len(nodes), "kept_links": len(links)},
        )
        return GraphSnapshot(
            nodes=[node.model_copy(deep=True) for node in nodes],
            links=[link.model_copy(deep=True) for link in links],
            layers=layers,
            tag_index=GraphBuilder.build_tag_index(nodes),
        )

    @staticmethod
    def _matches(node: GraphNode, criteria: GraphFilterCriteria) -> bool:
        if criteria.tags:
            wanted = {tag.lower() for tag in criteria.tags}
            if not wanted.intersection(node.tag_names()):
                return False

        if criteria.types and node.type not in criteria.types:
            return False

        if criteria.layers and node.layer_id not in criteria.layers:
            return False

        query = criteria.search_query.strip().lower()
        if query:
            haystack = " ".join([node.name, node.type, node.tag_string, *node.observations])
            if query not in haystack.lower():
                return False

        return True

    @staticmethod
    def layer_statistics(snapshot: GraphSnapshot) -> list[LayerStatistics]:
        """
        Count nodes and connections per layer.

        A link counts as a connection of every distinct layer it touches.
        """
        layer_of = {node.id: node.layer_id for node in snapshot.nodes}
        stats = {
            layer.id: LayerStatistics(layer_id=layer.id, name=layer.name, depth=layer.depth)
            for layer in snapshot.layers
        }

        for node in snapshot.nodes:
            if node.layer_id in stats:
                stats[node.layer_id].node_count += 1

        for link in snapshot.links:
            touched = {layer_of.get(link.source_id), layer_of.get(link.target_id)}
            for layer_id in touched:
                if layer_id not in stats:
                    continue
                stats[layer_id].connection_count += 1
                if link.is_inter_layer:
                    stats[layer_id].inter_layer_connection_count += 1

        return list(stats.values())
