"""
Tool output blocks returned by the remote graph-memory service.

Two shapes are accepted:
- ContentBlock: a single {type, text, is_error} block
- ToolResultBlock: an envelope {type: "mcp_tool_result", is_error, content: [...]}
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TEXT_BLOCK_TYPE = "text"
TOOL_RESULT_BLOCK_TYPE = "mcp_tool_result"


class ContentBlock(BaseModel):
    """Single block of tool output."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    text: str | None = None
    is_error: bool = Field(default=False, alias="isError")

    @property
    def is_usable_text(self) -> bool:
        return self.type == TEXT_BLOCK_TYPE and not self.is_error and bool(self.text)


class ToolResultBlock(BaseModel):
    """Tool result envelope wrapping content blocks."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = TOOL_RESULT_BLOCK_TYPE
    tool_use_id: str | None = None
    tool_name: str | None = None
    is_error: bool = Field(default=False, alias="isError")
    content: list[ContentBlock] = Field(default_factory=list)


RawBlock = ContentBlock | ToolResultBlock | dict[str, Any]
