"""
Response extractor for graph-memory tool output.

Tool results arrive as free text that usually wraps a single JSON object
in commentary, Markdown fences or log noise. The extractor concatenates the
usable text blocks, locates the first balanced {...} span and decodes it
strictly into an ExtractedGraph. Anything that does not decode is reported
as "no data" rather than raised.
"""

import json
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from graphloom.models.blocks import ContentBlock, RawBlock, ToolResultBlock
from graphloom.models.entity import ExtractedGraph
from graphloom.utils.exceptions import ExtractionError
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)


def find_json_object(text: str) -> str | None:
    """
    Locate the first balanced {...} span in text.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance.

    Args:
        text: Raw text possibly containing a JSON object

    Returns:
        The span including its outer braces, or None if no balanced span exists
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


class ResponseExtractor:
    """
    Extracts entity/relation payloads from tool output blocks.

    Only blocks with type "text" that are not error-flagged contribute.
    Tool result envelopes flagged as errors are skipped entirely.
    """

    def __init__(self, separator: str = "\n"):
        """
        Initialize extractor.

        Args:
            separator: String placed between concatenated text fragments
        """
        self.separator = separator

    def collect_text(self, blocks: Iterable[RawBlock]) -> str:
        """
        Concatenate usable text fragments from tool output blocks.

        Args:
            blocks: Content blocks, tool result envelopes, or raw dicts of either

        Returns:
            Joined text (empty string if nothing usable)
        """
        fragments: list[str] = []
        for block in blocks:
            for content in self._iter_content(block):
                if content.is_usable_text:
                    fragments.append(content.text)
        return self.separator.join(fragments)

    def extract(self, blocks: Iterable[RawBlock]) -> ExtractedGraph | None:
        """
        Extract graph data from tool output blocks.

        Args:
            blocks: Tool output blocks

        Returns:
            ExtractedGraph, or None when no data could be extracted
        """
        text = self.collect_text(blocks)
        if not text:
            logger.debug("No usable text blocks in tool output")
            return None
        return self.extract_text(text)

    def extract_text(self, text: str) -> ExtractedGraph | None:
        """
        Extract graph data from raw text.

        Args:
            text: Raw tool-result text

        Returns:
            ExtractedGraph, or None when no data could be extracted
        """
        try:
            return self._decode(text)
        except ExtractionError as e:
            logger.warning(
                f"No graph data extracted: {e.message}",
                extra={"operation": "extract", **e.context},
            )
            return None

    def _decode(self, text: str) -> ExtractedGraph:
        span = find_json_object(text)
        if span is None:
            raise ExtractionError("no balanced JSON object", context={"length": len(text)})

        try:
            payload = json.loads(span)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"invalid JSON: {e.msg}", context={"position": e.pos}) from e

        if not isinstance(payload, dict):
            raise ExtractionError("payload is not an object")
        if not isinstance(payload.get("entities"), list):
            raise ExtractionError("payload has no entities array")
        if payload.get("relations") is None:
            payload["relations"] = []

        try:
            extracted = ExtractedGraph.model_validate(payload)
        except PydanticValidationError as e:
            raise ExtractionError(
                "payload does not match entity/relation schema",
                context={"error_count": e.error_count()},
            ) from e

        logger.debug(
            f"Extracted {len(extracted.entities)} entities, {len(extracted.relations)} relations",
            extra={"entities": len(extracted.entities), "relations": len(extracted.relations)},
        )
        return extracted

    def _iter_content(self, block: RawBlock) -> list[ContentBlock]:
        decoded = self._decode_block(block)
        if decoded is None:
            return []
        if isinstance(decoded, ToolResultBlock):
            if decoded.is_error:
                logger.debug(
                    "Skipping error-flagged tool result",
                    extra={"tool_use_id": decoded.tool_use_id},
                )
                return []
            return decoded.content
        return [decoded]

    @staticmethod
    def _decode_block(block: RawBlock) -> ContentBlock | ToolResultBlock | None:
        if isinstance(block, (ContentBlock, ToolResultBlock)):
            return block
        if not isinstance(block, dict):
            logger.debug(f"Skipping non-mapping block of type {type(block).__name__}")
            return None

        model: Any = ToolResultBlock if isinstance(block.get("content"), list) else ContentBlock
        try:
            return model.model_validate(block)
        except PydanticValidationError:
            logger.debug("Skipping malformed tool output block", extra={"block_type": block.get("type")})
            return None
