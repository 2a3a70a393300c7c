"""Utility modules for GraphLoom."""

from graphloom.utils.exceptions import (
    CacheError,
    ConfigurationError,
    ExtractionError,
    GraphLoomError,
    GraphSourceError,
    NotFoundError,
    SnapshotIntegrityError,
    ValidationError,
)
from graphloom.utils.keys import (
    DEFAULT_LAYER_ID,
    highlight_key,
    layer_display_name,
    layer_id_for,
    link_key,
    slugify_type,
)
from graphloom.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Keys
    "DEFAULT_LAYER_ID",
    "layer_id_for",
    "layer_display_name",
    "slugify_type",
    "link_key",
    "highlight_key",
    # Exceptions
    "GraphLoomError",
    "ExtractionError",
    "SnapshotIntegrityError",
    "CacheError",
    "GraphSourceError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
]
