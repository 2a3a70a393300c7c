"""
Notifications published to graph consumers.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from graphloom.models.graph import GraphSnapshot


class NotificationKind(str, Enum):
    """Kinds of notifications the engine publishes."""

    SNAPSHOT_REPLACED = "snapshot_replaced"
    SUBSET_HIGHLIGHTED = "subset_highlighted"


class SnapshotReplaced(BaseModel):
    """The full graph was reloaded; carries the new snapshot."""

    kind: NotificationKind = NotificationKind.SNAPSHOT_REPLACED
    snapshot: GraphSnapshot
    version: int = 0
    published_at: datetime = Field(default_factory=datetime.now)


class SubsetHighlighted(BaseModel):
    """Specific nodes were looked up; carries their IDs."""

    kind: NotificationKind = NotificationKind.SUBSET_HIGHLIGHTED
    node_ids: list[str] = Field(default_factory=list)
    link_keys: list[str] = Field(default_factory=list)
    published_at: datetime = Field(default_factory=datetime.now)
