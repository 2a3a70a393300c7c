"""
Response extraction for tool output.

Turns raw, possibly noisy tool-result text into an ExtractedGraph.
"""

from graphloom.core.extraction.extractor import ResponseExtractor, find_json_object

__all__ = [
    "ResponseExtractor",
    "find_json_object",
]
