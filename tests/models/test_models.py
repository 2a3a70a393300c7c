"""
Tests for data models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from graphloom.models import (
    ByName,
    CacheMetrics,
    ContentBlock,
    Entity,
    ExtractedGraph,
    GraphFilterCriteria,
    GraphLink,
    GraphNode,
    GraphSnapshot,
    NodeLookupResult,
    Relation,
    Resolved,
    Tag,
    TagCategory,
    ToolResultBlock,
)


@pytest.mark.unit
class TestRecordModels:
    """Test externally supplied records."""

    def test_relation_accepts_wire_alias(self):
        relation = Relation.model_validate({"source": "A", "target": "B", "relationType": "likes"})

        assert relation.relation_type == "likes"
        assert relation.key == ("A", "B", "likes")

    def test_relation_accepts_field_name(self):
        relation = Relation(source="A", target="B", relation_type="likes")

        assert relation.model_dump(by_alias=True)["relationType"] == "likes"

    def test_entity_defaults(self):
        entity = Entity(name="A")

        assert entity.type == ""
        assert entity.observations == []

    def test_entity_requires_name(self):
        with pytest.raises(PydanticValidationError):
            Entity.model_validate({"type": "Project"})

    def test_extracted_graph_requires_entities(self):
        with pytest.raises(PydanticValidationError):
            ExtractedGraph.model_validate({"relations": []})

    def test_extracted_graph_is_empty(self):
        assert ExtractedGraph(entities=[]).is_empty
        assert not ExtractedGraph(entities=[Entity(name="A")]).is_empty


@pytest.mark.unit
class TestBlockModels:
    """Test tool output blocks."""

    def test_content_block_alias(self):
        block = ContentBlock.model_validate({"type": "text", "text": "x", "isError": True})

        assert block.is_error is True
        assert not block.is_usable_text

    def test_usable_text(self):
        assert ContentBlock(type="text", text="x").is_usable_text
        assert not ContentBlock(type="text", text="").is_usable_text
        assert not ContentBlock(type="image", text="x").is_usable_text

    def test_tool_result_defaults(self):
        block = ToolResultBlock()

        assert block.type == "mcp_tool_result"
        assert block.content == []


@pytest.mark.unit
class TestGraphModels:
    """Test enriched graph models."""

    def test_tag_weight_bounds(self):
        with pytest.raises(PydanticValidationError):
            Tag(name="x", category=TagCategory.KEYWORD, weight=11)

    def test_link_endpoint_union_from_dict(self):
        link = GraphLink.model_validate(
            {
                "source": {"kind": "resolved", "node_id": "A"},
                "target": {"kind": "by_name", "name": "B"},
                "relation_type": "likes",
            }
        )

        assert isinstance(link.source, Resolved)
        assert isinstance(link.target, ByName)
        assert link.key == ("A", "B", "likes")
        assert not link.is_resolved

    def test_endpoints_immutable(self):
        endpoint = ByName(name="A")

        with pytest.raises(PydanticValidationError):
            endpoint.name = "B"

    def test_snapshot_round_trips_through_json(self):
        snapshot = GraphSnapshot(
            nodes=[GraphNode(id="A", name="A"), GraphNode(id="B", name="B")],
            links=[
                GraphLink(
                    source=Resolved(node_id="A"),
                    target=Resolved(node_id="B"),
                    relation_type="likes",
                )
            ],
        )

        restored = GraphSnapshot.model_validate_json(snapshot.model_dump_json())

        assert restored == snapshot

    def test_snapshot_helpers(self):
        snapshot = GraphSnapshot(
            nodes=[GraphNode(id="A", name="A")],
            links=[
                GraphLink(
                    source=Resolved(node_id="A"),
                    target=ByName(name="Ghost"),
                    relation_type="haunts",
                )
            ],
        )

        assert snapshot.node_ids() == {"A"}
        assert snapshot.get_node("A").name == "A"
        assert snapshot.get_node("Ghost") is None
        assert snapshot.get_layer("layer-default") is None
        assert snapshot.dangling_links() == [("A", "Ghost", "haunts")]
        assert not snapshot.is_empty
        assert GraphSnapshot.empty().is_empty


@pytest.mark.unit
class TestViewModels:
    """Test filter, lookup and metrics models."""

    def test_filter_criteria_empty(self):
        assert GraphFilterCriteria().is_empty
        assert GraphFilterCriteria(search_query="   ").is_empty
        assert not GraphFilterCriteria(types=["Project"]).is_empty

    def test_lookup_result_node_ids(self):
        result = NodeLookupResult(nodes=[GraphNode(id="A", name="A")])

        assert result.node_ids == ["A"]

    def test_metrics_read_only(self):
        metrics = CacheMetrics(hits=1)

        with pytest.raises(PydanticValidationError):
            metrics.hits = 2
