"""Shared fixtures for GraphLoom tests.

Everything here runs in memory: graph sources are InMemoryGraphSource
instances, and cache expiry is driven by a manual clock instead of
wall time.
"""

import json
from typing import Any

import pytest

from graphloom.config import CacheConfig, Config
from graphloom.core.cache.snapshot_cache import SnapshotCache
from graphloom.core.enrichment.builder import GraphBuilder
from graphloom.core.enrichment.layers import LayerAssigner
from graphloom.core.enrichment.tags import TagMiner
from graphloom.core.merge.merger import GraphMerger
from graphloom.core.source.memory import InMemoryGraphSource
from graphloom.models.entity import Entity, ExtractedGraph, Relation
from graphloom.services.graph_engine import GraphEngine
from graphloom.services.notifier import UpdateNotifier


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def tool_result(payload: dict[str, Any] | str, is_error: bool = False) -> dict[str, Any]:
    """Render a payload the way the graph-memory service returns it."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "type": "mcp_tool_result",
        "tool_use_id": "toolu_test",
        "is_error": is_error,
        "content": [{"type": "text", "text": text}],
    }


def entity(name: str, entity_type: str = "Project", *observations: str) -> dict[str, Any]:
    return {"name": name, "type": entity_type, "observations": list(observations)}


def relation(source: str, target: str, relation_type: str) -> dict[str, Any]:
    return {"source": source, "target": target, "relationType": relation_type}


# Fixtures


@pytest.fixture
def config() -> Config:
    """Default configuration without the background sweeper."""
    return Config(cache=CacheConfig(enable_sweeper=False))


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock) -> SnapshotCache:
    return SnapshotCache(ttl_seconds=300.0, sweep_interval_seconds=0.01, clock=clock)


@pytest.fixture
def miner() -> TagMiner:
    return TagMiner()


@pytest.fixture
def assigner() -> LayerAssigner:
    return LayerAssigner()


@pytest.fixture
def builder(miner, assigner) -> GraphBuilder:
    return GraphBuilder(miner=miner, assigner=assigner)


@pytest.fixture
def merger(builder) -> GraphMerger:
    return GraphMerger(builder)


@pytest.fixture
def sample_graph() -> ExtractedGraph:
    """Small connected graph with two shared high-weight tags."""
    return ExtractedGraph(
        entities=[
            Entity(
                name="GraphLoom",
                type="Project",
                observations=["Core #research engine", "Uses a critical cache layer"],
            ),
            Entity(
                name="Viewer",
                type="Project",
                observations=["Renders the #research graph"],
            ),
            Entity(
                name="Alice",
                type="Person",
                observations=["Maintains the viewer"],
            ),
        ],
        relations=[
            Relation(source="Alice", target="Viewer", relation_type="maintains"),
            Relation(source="Viewer", target="GraphLoom", relation_type="depends_on"),
        ],
    )


@pytest.fixture
def source(sample_graph) -> InMemoryGraphSource:
    return InMemoryGraphSource(
        entities=sample_graph.entities,
        relations=sample_graph.relations,
    )


@pytest.fixture
async def notifier():
    notifier = UpdateNotifier(highlight_limit=50)
    yield notifier
    await notifier.drain()


@pytest.fixture
async def engine(source, config, cache, notifier):
    """Engine over the in-memory source with a manual-clock cache."""
    engine = GraphEngine(source=source, config=config, cache=cache, notifier=notifier)
    await engine.initialize()
    yield engine
    await engine.close()
