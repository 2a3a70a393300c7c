"""
Raw graph records as produced by the graph-memory service.
"""

from pydantic import BaseModel, ConfigDict, Field

from graphloom.utils.keys import link_key


class Entity(BaseModel):
    """Named thing with a type and free-text observations. Identity is the name."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Identity key (case-sensitive, exact match)")
    type: str = Field(default="", description="Free-text category")
    observations: list[str] = Field(default_factory=list, description="Ordered observations")


class Relation(BaseModel):
    """Directed labeled edge between two entity names."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source: str
    target: str
    relation_type: str = Field(..., alias="relationType")

    @property
    def key(self) -> tuple[str, str, str]:
        return link_key(self.source, self.target, self.relation_type)


class ExtractedGraph(BaseModel):
    """Entity/relation payload decoded from tool output."""

    model_config = ConfigDict(extra="ignore")

    entities: list[Entity]
    relations: list[Relation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entities and not self.relations
