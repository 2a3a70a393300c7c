"""
Identity helpers shared across the pipeline.

- Layers: layer-<tag>, plus the reserved layer-default
- Links: (source, target, relation_type) triples
- Type tags: slug-cased node types
"""

import re

DEFAULT_LAYER_ID = "layer-default"

_WHITESPACE_RUN = re.compile(r"\s+")


def layer_id_for(tag_name: str) -> str:
    """
    Build the layer ID for a tag.

    Returns:
        ID in format "layer-<tag>"
    """
    return f"layer-{tag_name}"


def layer_display_name(tag_name: str) -> str:
    """Capitalize the first character of a tag for display."""
    return tag_name[:1].upper() + tag_name[1:]


def slugify_type(node_type: str) -> str:
    """
    Slug-case a node type for use as a tag name.

    Args:
        node_type: Free-text type, e.g. "Development Phase"

    Returns:
        Lowercased type with whitespace runs replaced by hyphens
    """
    return _WHITESPACE_RUN.sub("-", node_type.lower())


def link_key(source: str, target: str, relation_type: str) -> tuple[str, str, str]:
    """Identity triple of a link."""
    return (source, target, relation_type)


def highlight_key(source: str, target: str) -> str:
    """
    Key used by consumers to highlight a link.

    Returns:
        Key in format "source-target"
    """
    return f"{source}-{target}"
