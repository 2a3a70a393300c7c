"""
Ingestion result models.

Models for tracking the outcome of a single pass through the
extract -> enrich -> merge -> cache pipeline.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class IngestionStatus(str, Enum):
    """Status of an ingestion operation."""

    COMPLETED = "completed"  # Merged and published
    EMPTY = "empty"  # Nothing extracted; valid empty result
    STALE = "stale"  # A newer write won the version race


class IngestionResult(BaseModel):
    """
    Result of an ingestion operation.

    Returned by GraphEngine.ingest() to describe what was merged.
    """

    status: IngestionStatus = Field(..., description="Ingestion status")
    version: int = Field(default=0, ge=0, description="Cache version stamp of the write")

    node_count: int = Field(default=0, ge=0, description="Nodes in the published snapshot")
    link_count: int = Field(default=0, ge=0, description="Links in the published snapshot")
    layer_count: int = Field(default=0, ge=0, description="Layers in the published snapshot")
    extracted_entities: int = Field(default=0, ge=0, description="Entities decoded from input")
    extracted_relations: int = Field(default=0, ge=0, description="Relations decoded from input")

    processing_time_ms: float = Field(default=0.0, ge=0, description="Processing time in ms")
    message: str | None = Field(default=None, description="Additional status message")

    created_at: datetime = Field(default_factory=datetime.now)
