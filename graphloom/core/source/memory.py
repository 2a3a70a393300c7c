"""
In-memory graph source.

Serves a fixed entity/relation set rendered the way the graph-memory
service renders it: a single tool result whose text block holds the JSON
graph. Useful for local development and tests.
"""

import json

from graphloom.core.source.base import GraphSource
from graphloom.models.blocks import ContentBlock, RawBlock, ToolResultBlock
from graphloom.models.entity import Entity, Relation


class InMemoryGraphSource(GraphSource):
    """Graph source holding entities and relations in memory."""

    def __init__(
        self,
        entities: list[Entity] | None = None,
        relations: list[Relation] | None = None,
    ):
        self.entities: list[Entity] = list(entities or [])
        self.relations: list[Relation] = list(relations or [])
        self.calls: list[str] = []

    def add_entities(self, entities: list[Entity]) -> None:
        self.entities.extend(entities)

    def add_relations(self, relations: list[Relation]) -> None:
        self.relations.extend(relations)

    async def read_graph(self) -> list[RawBlock]:
        self.calls.append("read_graph")
        return [self._render("read_graph", self.entities, self.relations)]

    async def find_nodes(self, names: list[str]) -> list[RawBlock]:
        self.calls.append("find_nodes")
        wanted = set(names)
        entities = [entity for entity in self.entities if entity.name in wanted]
        relations = [
            relation
            for relation in self.relations
            if relation.source in wanted and relation.target in wanted
        ]
        return [self._render("find_nodes", entities, relations)]

    @staticmethod
    def _render(tool: str, entities: list[Entity], relations: list[Relation]) -> ToolResultBlock:
        payload = {
            "entities": [entity.model_dump() for entity in entities],
            "relations": [relation.model_dump(by_alias=True) for relation in relations],
        }
        return ToolResultBlock(
            tool_name=tool,
            content=[ContentBlock(type="text", text=json.dumps(payload, indent=2))],
        )

    async def close(self):
        pass
