"""
GraphLoom FastAPI Application

A REST API server for the GraphLoom sync engine.
Provides endpoints for loading, looking up, ingesting and filtering the graph.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from graphloom.config import Config
from graphloom.core.factory import SourceFactory
from graphloom.models.cache import CacheMetrics, CacheStrategy
from graphloom.models.graph import GraphNode, GraphSnapshot
from graphloom.models.ingestion import IngestionResult
from graphloom.models.views import GraphFilterCriteria, LayerStatistics
from graphloom.services.graph_engine import GraphEngine
from graphloom.utils.exceptions import (
    GraphSourceError,
    NotFoundError,
    SnapshotIntegrityError,
    ValidationError,
)
from graphloom.utils.logger import get_logger, setup_logging

# Global engine instance
engine: GraphEngine | None = None
logger = get_logger(__name__)


# Pydantic models for API
class FindNodesRequest(BaseModel):
    """Request model for a node lookup."""

    names: list[str] = Field(..., min_length=1, description="Entity names to look up")


class FindNodesResponse(BaseModel):
    """Response model for a node lookup."""

    nodes: list[GraphNode]
    node_ids: list[str]
    highlighted_links: list[str]


class IngestRequest(BaseModel):
    """Request model for ingesting raw tool output."""

    blocks: list[dict[str, Any]] = Field(..., description="Raw tool output blocks")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    source: str
    cache_ttl_seconds: float


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting GraphLoom server")
    logger.info(
        f"Configuration: source={config.source.provider} ({config.source.base_url}), "
        f"cache_ttl={config.cache.ttl_seconds}s, layer_spacing={config.layers.spacing}"
    )

    logger.info("Creating graph source")
    source = SourceFactory.create(config.source)

    engine = GraphEngine(source=source, config=config)
    await engine.initialize()
    logger.info("GraphLoom engine initialized")

    yield

    logger.info("Shutting down GraphLoom server")
    await engine.close()
    engine = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="GraphLoom API",
    description="Knowledge-graph ingestion, enrichment and sync engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_engine() -> GraphEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if engine else "initializing",
        engine_initialized=engine is not None,
        source=type(engine.source).__name__ if engine else "none",
        cache_ttl_seconds=engine.cache.ttl_seconds if engine else 0.0,
    )


# Graph endpoints
@app.get("/graph", response_model=GraphSnapshot)
async def load_full_graph(
    strategy: CacheStrategy = Query(default=CacheStrategy.NETWORK_FIRST),
):
    """
    Load the complete graph.

    Strategies:
    - "cache_first": serve the cached snapshot when fresh
    - "network_first": always read from the source
    - "stale_while_revalidate": serve the cached snapshot and refresh in the background
    """
    current = _require_engine()

    try:
        return await current.load_full_graph(strategy)
    except SnapshotIntegrityError as e:
        raise HTTPException(status_code=409, detail=e.message) from e
    except GraphSourceError as e:
        logger.error(f"Error loading graph: {e}")
        raise HTTPException(status_code=502, detail=e.message) from e


@app.post("/graph/find", response_model=FindNodesResponse)
async def find_nodes(request: FindNodesRequest):
    """
    Look up specific nodes by name.

    Matching nodes are highlighted for observers; the full graph is unchanged.
    """
    current = _require_engine()

    try:
        result = await current.find_nodes(request.names)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    except GraphSourceError as e:
        logger.error(f"Error finding nodes: {e}")
        raise HTTPException(status_code=502, detail=e.message) from e

    return FindNodesResponse(
        nodes=result.nodes,
        node_ids=result.node_ids,
        highlighted_links=result.highlighted_links,
    )


@app.post("/graph/ingest", response_model=IngestionResult)
async def ingest(request: IngestRequest):
    """
    Merge raw tool output into the full graph.

    A payload whose relations reference unknown entities is rejected with
    409 and the previous snapshot stays in place.
    """
    current = _require_engine()

    try:
        return await current.ingest(request.blocks)
    except SnapshotIntegrityError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": e.message,
                "dangling": [list(key) for key in e.dangling],
            },
        ) from e


@app.get("/graph/nodes/{node_id}", response_model=GraphNode)
async def get_node(node_id: str):
    """Get a node of the current graph by name."""
    current = _require_engine()

    try:
        return await current.get_node(node_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e


@app.post("/graph/filter", response_model=GraphSnapshot)
async def filter_graph(criteria: GraphFilterCriteria):
    """Filter the current graph by tags, types, layers and text."""
    current = _require_engine()
    return await current.filter_graph(criteria)


@app.get("/graph/layers/stats", response_model=list[LayerStatistics])
async def layer_statistics():
    """Per-layer node and connection counts."""
    current = _require_engine()
    return await current.layer_statistics()


@app.get("/cache/metrics", response_model=CacheMetrics)
async def cache_metrics():
    """Snapshot cache counters."""
    current = _require_engine()
    return current.cache_metrics()
