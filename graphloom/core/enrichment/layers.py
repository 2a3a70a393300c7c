"""Layer discovery and node-to-layer assignment."""

from pydantic import BaseModel, Field

from graphloom.config import LayerConfig, PaletteConfig
from graphloom.models.graph import GraphNode, Layer, TagCategory
from graphloom.utils.keys import DEFAULT_LAYER_ID, layer_display_name, layer_id_for
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


class _TagUsage(BaseModel):
    name: str
    weight: int
    node_ids: list[str] = Field(default_factory=list)


class LayerAssigner:
    """
    Clusters nodes into layers keyed by shared high-weight tags.

    Layers are a function of the entire node population, so both steps are
    always recomputed from scratch:
    A. discover layers from tags with weight >= min_tag_weight that appear
       on at least min_node_count nodes
    B. route every node to the layer of its highest-weight matching tag,
       or to the default layer
    """

    def __init__(self, config: LayerConfig | None = None, palette: PaletteConfig | None = None):
        self.config = config or LayerConfig()
        self.palette = palette or PaletteConfig()

    def default_layer(self) -> Layer:
        return Layer(
            id=DEFAULT_LAYER_ID,
            name="Default",
            depth=-self.config.spacing,
            member_tag_names=[],
            color=self.palette.default_color,
        )

    def generate_layers(self, nodes: list[GraphNode]) -> list[Layer]:
        """
        Discover layers from the tags of all nodes.

        Args:
            nodes: Current node population

        Returns:
            Tag layers ordered by depth, followed by the default layer
        """
        usage_by_category: dict[TagCategory, dict[str, _TagUsage]] = {}
        for node in nodes:
            for tag in node.tags:
                category_usage = usage_by_category.setdefault(tag.category, {})
                usage = category_usage.get(tag.name)
                if usage is None:
                    usage = _TagUsage(name=tag.name, weight=tag.weight)
                    category_usage[tag.name] = usage
                if node.id not in usage.node_ids:
                    usage.node_ids.append(node.id)

        important: list[str] = []
        for category_usage in usage_by_category.values():
            for usage in category_usage.values():
                if (
                    usage.weight >= self.config.min_tag_weight
                    and len(usage.node_ids) >= self.config.min_node_count
                    and usage.name not in important
                ):
                    important.append(usage.name)

        carriers = {
            name: sum(1 for node in nodes if any(tag.name == name for tag in node.tags))
            for name in important
        }
        # Stable sort keeps discovery order among equal counts
        important.sort(key=lambda name: carriers[name], reverse=True)

        layers = [
            Layer(
                id=layer_id_for(name),
                name=layer_display_name(name),
                depth=index * self.config.spacing,
                member_tag_names=[name],
                color=self.palette.layer_color(name),
            )
            for index, name in enumerate(important)
        ]
        layers.append(self.default_layer())

        logger.debug(
            f"Generated {len(layers)} layers from {len(nodes)} nodes",
            extra={"layers": len(layers), "nodes": len(nodes)},
        )
        return layers

    def assign(self, nodes: list[GraphNode], layers: list[Layer]) -> list[GraphNode]:
        """
        Assign each node to exactly one layer.

        Resets and recounts node_count on the given layers.

        Args:
            nodes: Nodes to assign
            layers: Layers from generate_layers()

        Returns:
            Copies of the nodes with layer_id set
        """
        layer_by_tag: dict[str, Layer] = {}
        default = None
        for layer in layers:
            layer.node_count = 0
            if layer.id == DEFAULT_LAYER_ID:
                default = layer
            for tag_name in layer.member_tag_names:
                layer_by_tag.setdefault(tag_name, layer)

        if default is None:
            default = self.default_layer()
            layers.append(default)

        assigned = []
        for node in nodes:
            best = default
            highest_weight = 0
            for tag in node.tags:
                match = layer_by_tag.get(tag.name)
                if match is not None and tag.weight > highest_weight:
                    best = match
                    highest_weight = tag.weight

            best.node_count += 1
            assigned.append(
                node.model_copy(
                    update={"layer_id": best.id, "tag_string": " ".join(node.tag_names())}
                )
            )

        return assigned

    def apply(self, nodes: list[GraphNode]) -> tuple[list[GraphNode], list[Layer]]:
        """Regenerate layers for the node set and assign every node."""
        layers = self.generate_layers(nodes)
        return self.assign(nodes, layers), layers
