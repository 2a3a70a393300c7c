"""
Tests for layer discovery and node assignment.
"""

import pytest

from graphloom.config import LayerConfig
from graphloom.core.enrichment.layers import LayerAssigner
from graphloom.models.graph import GraphNode, Tag, TagCategory
from graphloom.utils.keys import DEFAULT_LAYER_ID


def make_node(name: str, *tags: tuple[str, int]) -> GraphNode:
    """Node with keyword tags given as (name, weight) pairs."""
    return GraphNode(
        id=name,
        name=name,
        tags=[Tag(name=tag, category=TagCategory.KEYWORD, weight=weight) for tag, weight in tags],
    )


@pytest.mark.unit
class TestLayerDiscovery:
    """Test layer generation from the node population."""

    def test_default_layer_always_present(self, assigner):
        layers = assigner.generate_layers([])

        assert len(layers) == 1
        default = layers[0]
        assert default.id == DEFAULT_LAYER_ID
        assert default.depth == -200.0
        assert default.member_tag_names == []

    def test_layer_needs_weight_and_two_nodes(self, assigner):
        nodes = [
            make_node("A", ("shared", 7), ("light", 6)),
            make_node("B", ("shared", 7), ("light", 6)),
            make_node("C", ("lonely", 9)),
        ]

        layers = assigner.generate_layers(nodes)

        assert [layer.id for layer in layers] == ["layer-shared", DEFAULT_LAYER_ID]
        assert layers[0].member_tag_names == ["shared"]
        assert layers[0].name == "Shared"

    def test_layers_ordered_by_node_count(self, assigner):
        nodes = [
            make_node("A", ("pair", 8), ("trio", 8)),
            make_node("B", ("pair", 8), ("trio", 8)),
            make_node("C", ("trio", 8)),
        ]

        layers = assigner.generate_layers(nodes)

        assert [layer.id for layer in layers] == ["layer-trio", "layer-pair", DEFAULT_LAYER_ID]
        assert [layer.depth for layer in layers] == [0.0, 200.0, -200.0]

    def test_ties_keep_discovery_order(self, assigner):
        nodes = [
            make_node("A", ("first", 8), ("second", 8)),
            make_node("B", ("second", 8), ("first", 8)),
        ]

        layers = assigner.generate_layers(nodes)

        assert [layer.id for layer in layers][:2] == ["layer-first", "layer-second"]

    def test_default_layer_lowest_depth(self, assigner):
        nodes = [make_node(n, ("a", 8), ("b", 8), ("c", 8)) for n in ("X", "Y")]

        layers = assigner.generate_layers(nodes)

        default = next(layer for layer in layers if layer.id == DEFAULT_LAYER_ID)
        assert all(default.depth < layer.depth for layer in layers if layer is not default)

    def test_configurable_spacing(self):
        assigner = LayerAssigner(LayerConfig(spacing=50.0))
        nodes = [make_node(n, ("a", 8), ("b", 8)) for n in ("X", "Y")]

        layers = assigner.generate_layers(nodes)

        assert [layer.depth for layer in layers] == [0.0, 50.0, -50.0]

    def test_same_name_in_two_categories_creates_one_layer(self, assigner):
        nodes = [
            GraphNode(
                id=name,
                name=name,
                tags=[
                    Tag(name="tool", category=TagCategory.HASHTAG, weight=8),
                    Tag(name="tool", category=TagCategory.TYPE, weight=8),
                ],
            )
            for name in ("A", "B")
        ]

        layers = assigner.generate_layers(nodes)

        assert [layer.id for layer in layers] == ["layer-tool", DEFAULT_LAYER_ID]


@pytest.mark.unit
class TestLayerAssignment:
    """Test routing nodes to layers."""

    def test_highest_weight_tag_wins(self, assigner):
        nodes = [
            make_node("A", ("tool", 8), ("critical", 9), ("cache", 9)),
            make_node("B", ("tool", 8), ("critical", 9), ("cache", 9)),
        ]

        assigned, layers = assigner.apply(nodes)

        assert {node.layer_id for node in assigned} == {"layer-critical"}
        counts = {layer.id: layer.node_count for layer in layers}
        assert counts["layer-critical"] == 2
        assert counts["layer-tool"] == 0
        assert counts[DEFAULT_LAYER_ID] == 0

    def test_unmatched_node_goes_to_default(self, assigner):
        nodes = [
            make_node("A", ("shared", 8)),
            make_node("B", ("shared", 8)),
            make_node("C", ("other", 3)),
        ]

        assigned, layers = assigner.apply(nodes)

        by_id = {node.id: node for node in assigned}
        assert by_id["C"].layer_id == DEFAULT_LAYER_ID
        assert by_id["A"].layer_id == "layer-shared"

    def test_every_node_has_existing_layer(self, assigner):
        nodes = [
            make_node("A", ("x", 8), ("y", 9)),
            make_node("B", ("x", 8)),
            make_node("C", ("y", 9)),
            make_node("D"),
        ]

        assigned, layers = assigner.apply(nodes)

        layer_ids = {layer.id for layer in layers}
        assert all(node.layer_id in layer_ids for node in assigned)
        assert sum(layer.node_count for layer in layers) == len(nodes)

    def test_assign_recounts_from_zero(self, assigner):
        nodes = [make_node("A", ("x", 8)), make_node("B", ("x", 8))]
        layers = assigner.generate_layers(nodes)

        assigner.assign(nodes, layers)
        assigner.assign(nodes, layers)

        assert layers[0].node_count == 2

    def test_assign_sets_tag_string(self, assigner):
        nodes = [make_node("A", ("x", 8), ("y", 5))]

        assigned, _ = assigner.apply(nodes)

        assert assigned[0].tag_string == "x y"

    def test_assign_does_not_mutate_input(self, assigner):
        nodes = [make_node("A", ("x", 8)), make_node("B", ("x", 8))]

        assigner.apply(nodes)

        assert all(node.layer_id is None for node in nodes)
