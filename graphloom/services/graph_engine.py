"""
Unified Graph Engine - integrates the ingestion pipeline.

Brings together:
- Graph source (remote graph-memory service)
- Response extraction
- Tag mining, layer assignment and snapshot building
- Graph merging and validation
- Snapshot cache and update notifications
"""

import time
from collections.abc import Iterable

from graphloom.config import Config
from graphloom.core.cache.snapshot_cache import SnapshotCache
from graphloom.core.enrichment.builder import GraphBuilder
from graphloom.core.enrichment.layers import LayerAssigner
from graphloom.core.enrichment.tags import TagMiner
from graphloom.core.extraction.extractor import ResponseExtractor
from graphloom.core.merge.merger import GraphMerger
from graphloom.core.source.base import GraphSource
from graphloom.models.blocks import RawBlock
from graphloom.models.cache import CacheKey, CacheMetrics, CacheStrategy
from graphloom.models.graph import GraphNode, GraphSnapshot
from graphloom.models.ingestion import IngestionResult, IngestionStatus
from graphloom.models.views import GraphFilterCriteria, LayerStatistics, NodeLookupResult
from graphloom.services.graph_filter import GraphFilter
from graphloom.services.notifier import GraphObserver, UpdateNotifier
from graphloom.utils.exceptions import NotFoundError, SnapshotIntegrityError, ValidationError
from graphloom.utils.keys import highlight_key
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


class GraphEngine:
    """
    Unified Graph Engine.

    Operations:
    - load_full_graph: read the whole graph under a cache strategy
    - find_nodes: look up specific nodes and highlight them
    - ingest: merge raw tool output into the current snapshot
    - filter_graph / layer_statistics: derived views of the current snapshot
    """

    def __init__(
        self,
        source: GraphSource,
        config: Config | None = None,
        cache: SnapshotCache | None = None,
        notifier: UpdateNotifier | None = None,
    ):
        """
        Initialize Graph Engine.

        Args:
            source: Remote graph source
            config: Configuration object
            cache: Snapshot cache (built from config if omitted)
            notifier: Update notifier (built from config if omitted)
        """
        self.source = source
        self.config = config or Config()

        self.cache = cache or SnapshotCache(
            ttl_seconds=self.config.cache.ttl_seconds,
            sweep_interval_seconds=self.config.cache.sweep_interval_seconds,
        )
        self.notifier = notifier or UpdateNotifier(
            highlight_limit=self.config.notifier.highlight_limit
        )

        palette = self.config.palette
        self.extractor = ResponseExtractor()
        self.builder = GraphBuilder(
            miner=TagMiner(self.config.enrichment, palette),
            assigner=LayerAssigner(self.config.layers, palette),
            palette=palette,
        )
        self.merger = GraphMerger(self.builder)
        self.graph_filter = GraphFilter()

    async def initialize(self) -> None:
        """Start background workers."""
        logger.info("Initializing Graph Engine")

        if self.config.cache.enable_sweeper:
            self.cache.start_sweeper()
            logger.info("Cache expiry sweeper started")

        logger.info("Graph Engine ready")

    async def close(self) -> None:
        """Stop background workers and release the source."""
        await self.cache.stop_sweeper()
        await self.cache.wait_for_refreshes()
        await self.notifier.drain()
        await self.source.close()
        logger.info("Graph Engine closed")

    def subscribe(self, observer: GraphObserver) -> None:
        self.notifier.subscribe(observer)

    def unsubscribe(self, observer: GraphObserver) -> None:
        self.notifier.unsubscribe(observer)

    # Pipeline

    def build_fragment(self, blocks: Iterable[RawBlock]) -> GraphSnapshot | None:
        """
        Extract and enrich raw tool output.

        Returns:
            Enriched fragment, or None when nothing was extracted
        """
        extracted = self.extractor.extract(blocks)
        if extracted is None or extracted.is_empty:
            return None
        return self.builder.build(extracted)

    def _merge_into(self, current: GraphSnapshot | None, fragment: GraphSnapshot) -> GraphSnapshot:
        return self.merger.merge(current, fragment)

    def _on_full_graph_stored(self, key: CacheKey, snapshot: GraphSnapshot, version: int) -> None:
        self.notifier.publish_snapshot(snapshot, version)

    # Operations

    async def load_full_graph(
        self, strategy: CacheStrategy = CacheStrategy.NETWORK_FIRST
    ) -> GraphSnapshot:
        """
        Load the complete graph.

        A fresh read replaces the cached full graph wholesale, so entities the
        source no longer returns drop out. Merging is reserved for ingest().

        Args:
            strategy: Cache read strategy

        Returns:
            Current full-graph snapshot

        Raises:
            GraphSourceError: If the source fails during a foreground fetch
            SnapshotIntegrityError: If the fresh graph has dangling links;
                the previous snapshot stays cached
        """
        logger.info(f"Loading full graph ({CacheStrategy(strategy).value})")

        async def fetch_full_graph() -> GraphSnapshot:
            blocks = await self.source.read_graph()
            fragment = self.build_fragment(blocks)
            if fragment is None:
                logger.warning("read_graph returned no graph data")
                return GraphSnapshot.empty()
            self.merger.validate(fragment)
            return fragment

        snapshot = await self.cache.fetch(
            CacheKey.FULL_GRAPH,
            fetch_full_graph,
            strategy,
            on_stored=self._on_full_graph_stored,
        )

        logger.info(
            f"Full graph: {len(snapshot.nodes)} nodes, {len(snapshot.links)} links",
            extra={"nodes": len(snapshot.nodes), "links": len(snapshot.links)},
        )
        return snapshot

    async def find_nodes(self, names: list[str]) -> NodeLookupResult:
        """
        Look up specific nodes by name and highlight them.

        The lookup result is cached under search_results; it does not
        change the full graph.

        Args:
            names: Entity names

        Returns:
            Found nodes and link keys to highlight

        Raises:
            ValidationError: If no names are given
            GraphSourceError: If the source fails
        """
        names = [name.strip() for name in names if name and name.strip()]
        if not names:
            raise ValidationError("find_nodes requires at least one name")

        logger.info(f"Finding {len(names)} nodes", extra={"names": names[:10]})

        blocks = await self.source.find_nodes(names)
        fragment = self.build_fragment(blocks)
        if fragment is None:
            return NodeLookupResult()

        highlighted = [highlight_key(link.source_id, link.target_id) for link in fragment.links]

        resolvable = [link for link in fragment.links if link.is_resolved]
        if len(resolvable) < len(fragment.links):
            logger.debug(
                f"Dropping {len(fragment.links) - len(resolvable)} links outside the lookup",
                extra={"links": len(fragment.links), "resolvable": len(resolvable)},
            )
        subset = fragment.model_copy(update={"links": resolvable})

        await self.cache.set(CacheKey.SEARCH_RESULTS, subset)

        result = NodeLookupResult(nodes=subset.nodes, highlighted_links=highlighted)
        if result.nodes:
            self.notifier.publish_highlight(result.node_ids, highlighted)
        return result

    async def ingest(self, raw_blocks: Iterable[RawBlock]) -> IngestionResult:
        """
        Merge raw tool output into the full graph.

        Args:
            raw_blocks: Tool output blocks

        Returns:
            Ingestion result

        Raises:
            SnapshotIntegrityError: If the merged snapshot has dangling links;
                the previous snapshot stays cached
        """
        start = time.time()

        extracted = self.extractor.extract(raw_blocks)
        if extracted is None or extracted.is_empty:
            logger.info("Ingestion found no graph data")
            return IngestionResult(
                status=IngestionStatus.EMPTY,
                processing_time_ms=(time.time() - start) * 1000,
                message="No entities or relations extracted",
            )

        version = self.cache.next_version(CacheKey.FULL_GRAPH)
        fragment = self.builder.build(extracted)

        try:
            snapshot, accepted = await self.cache.update(
                CacheKey.FULL_GRAPH,
                lambda current: self._merge_into(current, fragment),
                version,
            )
        except SnapshotIntegrityError as e:
            logger.error(
                f"Ingestion rejected: {e.message}",
                extra={"operation": "ingest", "version": version, **e.context},
            )
            raise

        elapsed = (time.time() - start) * 1000
        common = {
            "version": version,
            "extracted_entities": len(extracted.entities),
            "extracted_relations": len(extracted.relations),
            "processing_time_ms": elapsed,
        }

        if not accepted:
            logger.info(
                f"Ingestion v{version} superseded by a newer write",
                extra={"operation": "ingest", "version": version},
            )
            return IngestionResult(
                status=IngestionStatus.STALE,
                message="A newer snapshot was committed first",
                **common,
            )

        self.notifier.publish_snapshot(snapshot, version)

        logger.info(
            f"Ingested {len(extracted.entities)} entities, {len(extracted.relations)} relations "
            f"({elapsed:.1f}ms)",
            extra={"operation": "ingest", "version": version, "nodes": len(snapshot.nodes)},
        )
        return IngestionResult(
            status=IngestionStatus.COMPLETED,
            node_count=len(snapshot.nodes),
            link_count=len(snapshot.links),
            layer_count=len(snapshot.layers),
            **common,
        )

    # Views

    async def current_snapshot(self) -> GraphSnapshot:
        """Current full-graph snapshot from the cache (empty if none)."""
        return await self.cache.get(CacheKey.FULL_GRAPH) or GraphSnapshot.empty()

    async def filter_graph(self, criteria: GraphFilterCriteria) -> GraphSnapshot:
        """
        Filter the current full graph and cache the result under filtered_graph.
        """
        snapshot = await self.current_snapshot()
        filtered = self.graph_filter.filter(snapshot, criteria)
        await self.cache.set(CacheKey.FILTERED_GRAPH, filtered)
        return filtered

    async def layer_statistics(self) -> list[LayerStatistics]:
        """Per-layer node and connection counts of the current full graph."""
        snapshot = await self.current_snapshot()
        return self.graph_filter.layer_statistics(snapshot)

    async def get_node(self, node_id: str) -> GraphNode:
        """
        Get a node of the current full graph.

        Raises:
            NotFoundError: If the node is not in the current snapshot
        """
        node = (await self.current_snapshot()).get_node(node_id)
        if node is None:
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})
        return node

    def cache_metrics(self) -> CacheMetrics:
        return self.cache.metrics()
