"""
Graph merge engine.

Folds an incoming snapshot fragment into an existing snapshot without losing
history, then regenerates every population-dependent field and validates
the result before it can be published.
"""

from datetime import datetime

from graphloom.core.enrichment.builder import GraphBuilder, unique
from graphloom.models.graph import GraphLink, GraphNode, GraphSnapshot
from graphloom.utils.exceptions import SnapshotIntegrityError
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


class GraphMerger:
    """
    Merges snapshots.

    - Nodes: identity by name; observations unioned, derived fields recomputed
    - Links: identity by (source, target, relation_type); existing wins
    - Post-merge: layers, link properties and tag index regenerated
    - Validation: every link endpoint must resolve to a merged node
    """

    def __init__(self, builder: GraphBuilder | None = None):
        """
        Initialize merger.

        Args:
            builder: Builder used to re-enrich merged nodes and finalize snapshots
        """
        self.builder = builder or GraphBuilder()

    def merge(
        self,
        existing: GraphSnapshot | None,
        incoming: GraphSnapshot,
        now: datetime | None = None,
    ) -> GraphSnapshot:
        """
        Merge an incoming snapshot into an existing one.

        Args:
            existing: Current snapshot (None is treated as empty)
            incoming: Newly extracted fragment
            now: Timestamp stamped on changed nodes (default: current time)

        Returns:
            Validated merged snapshot

        Raises:
            SnapshotIntegrityError: If a merged link references an unknown node
        """
        existing = existing or GraphSnapshot.empty()
        now = now or datetime.now()

        merged_nodes: dict[str, GraphNode] = {node.id: node for node in existing.nodes}
        updated = 0
        for node in incoming.nodes:
            current = merged_nodes.get(node.id)
            if current is None:
                merged_nodes[node.id] = node
                continue
            merged = self._merge_node(current, node, now)
            if merged is not current:
                updated += 1
            merged_nodes[node.id] = merged

        merged_links: dict[tuple[str, str, str], GraphLink] = {
            link.key: link for link in existing.links
        }
        for link in incoming.links:
            merged_links.setdefault(link.key, link)

        snapshot = self.builder.finalize(list(merged_nodes.values()), list(merged_links.values()))
        self.validate(snapshot)

        logger.info(
            f"Merged snapshot: {len(snapshot.nodes)} nodes, {len(snapshot.links)} links, "
            f"{len(snapshot.layers)} layers",
            extra={
                "operation": "merge",
                "nodes": len(snapshot.nodes),
                "links": len(snapshot.links),
                "layers": len(snapshot.layers),
                "updated_nodes": updated,
                "incoming_nodes": len(incoming.nodes),
                "incoming_links": len(incoming.links),
            },
        )
        return snapshot

    def _merge_node(self, current: GraphNode, incoming: GraphNode, now: datetime) -> GraphNode:
        """
        Merge a node present in both snapshots.

        Tags and metadata are recomputed from the unioned observations, never
        concatenated, so tags from text that no longer exists do not survive.
        A node whose observations and type are unchanged is returned as-is.
        """
        observations = unique([*current.observations, *incoming.observations])
        node_type = incoming.type or current.type

        if observations == current.observations and node_type == current.type:
            return current

        return self.builder.enrich_node(
            current.name,
            node_type,
            observations,
            created_at=current.metadata.created_at,
            updated_at=now,
        )

    @staticmethod
    def validate(snapshot: GraphSnapshot) -> None:
        """
        Check that every link endpoint resolves to a node of the snapshot.

        Raises:
            SnapshotIntegrityError: Naming the dangling links
        """
        dangling = snapshot.dangling_links()
        if not dangling:
            return

        logger.error(
            f"Rejecting snapshot with {len(dangling)} dangling links",
            extra={"operation": "validate", "dangling": [list(key) for key in dangling[:10]]},
        )
        raise SnapshotIntegrityError(
            f"{len(dangling)} link(s) reference nodes missing from the snapshot",
            dangling=dangling,
            context={"dangling_count": len(dangling)},
        )
