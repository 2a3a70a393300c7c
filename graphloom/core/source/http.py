"""
HTTP graph source using httpx.

Posts tool invocations to a relay endpoint that forwards them to the
graph-memory service and answers with the tool-result envelope:

    POST {base_url}  {"tool": "read_graph", "input": {}}
    -> {"content": [{"type": "mcp_tool_result", "is_error": false,
                     "content": [{"type": "text", "text": "..."}]}, ...]}
"""

from typing import Any

import httpx

from graphloom.core.source.base import GraphSource
from graphloom.models.blocks import TOOL_RESULT_BLOCK_TYPE, RawBlock
from graphloom.utils.exceptions import GraphSourceError
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


class HttpGraphSource(GraphSource):
    """
    Graph source backed by an HTTP relay.

    Only tool-result blocks from the relay response are returned; free
    assistant prose and tool-use echoes are dropped here.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize HTTP graph source.

        Args:
            base_url: Relay endpoint URL
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            client: Optional preconfigured client (e.g. with a mock transport)
        """
        self.base_url = base_url
        self.timeout = timeout

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self.client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    async def read_graph(self) -> list[RawBlock]:
        return await self._call_tool("read_graph", {})

    async def find_nodes(self, names: list[str]) -> list[RawBlock]:
        return await self._call_tool("find_nodes", {"names": list(names)})

    async def _call_tool(self, tool: str, tool_input: dict[str, Any]) -> list[RawBlock]:
        logger.debug(f"Calling {tool} via relay", extra={"tool": tool, "url": self.base_url})
        try:
            response = await self.client.post(
                self.base_url, json={"tool": tool, "input": tool_input}
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise GraphSourceError(
                f"{tool} failed with status {e.response.status_code}",
                context={"tool": tool, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise GraphSourceError(
                f"{tool} request failed: {e}",
                context={"tool": tool, "error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            raise GraphSourceError(
                f"{tool} returned a non-JSON body", context={"tool": tool}
            ) from e

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            logger.warning(f"{tool} response has no content array", extra={"tool": tool})
            return []

        blocks = [
            block
            for block in content
            if isinstance(block, dict) and block.get("type") == TOOL_RESULT_BLOCK_TYPE
        ]
        logger.debug(
            f"{tool} returned {len(blocks)} tool result blocks",
            extra={"tool": tool, "content_blocks": len(content), "tool_results": len(blocks)},
        )
        return blocks

    async def close(self):
        await self.client.aclose()
