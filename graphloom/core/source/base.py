"""
Abstract base class for remote graph sources.
Only the response contract matters here: sources return raw tool output
blocks which the extractor decodes.
"""

from abc import ABC, abstractmethod

from graphloom.models.blocks import RawBlock


class GraphSource(ABC):
    """
    Abstract producer of graph-memory tool output.

    Responsibilities:
    - Read the complete graph (read_graph tool)
    - Look up specific nodes by name (find_nodes tool)
    """

    @abstractmethod
    async def read_graph(self) -> list[RawBlock]:
        """
        Fetch the complete graph.

        Returns:
            Tool output blocks containing the graph as text

        Raises:
            GraphSourceError: If the transport fails
        """
        pass

    @abstractmethod
    async def find_nodes(self, names: list[str]) -> list[RawBlock]:
        """
        Fetch specific nodes by name.

        Args:
            names: Entity names to look up

        Returns:
            Tool output blocks containing the matching subgraph as text

        Raises:
            GraphSourceError: If the transport fails
        """
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        """
