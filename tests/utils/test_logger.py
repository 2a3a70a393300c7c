"""
Tests for logging setup.
"""

import json

import pytest
from loguru import logger

from graphloom.utils.logger import console_format, file_format, get_logger, render_context


@pytest.fixture
def text_sink():
    messages = []
    handler_id = logger.add(messages.append, format=file_format, level="DEBUG", colorize=False)
    yield messages
    logger.remove(handler_id)


@pytest.mark.unit
class TestRenderContext:
    """Test call-site context rendering."""

    def test_dict_rendered_as_pairs(self):
        assert render_context({"nodes": 3, "key": "full_graph"}) == " | nodes=3 key=full_graph"

    def test_missing_context_renders_nothing(self):
        assert render_context(None) == ""
        assert render_context({}) == ""

    def test_non_dict_context(self):
        assert render_context("ingest") == " | ingest"


@pytest.mark.unit
class TestSinkFormats:
    """Test that structured context reaches text sinks."""

    def test_context_appended_to_message(self, text_sink):
        get_logger("graphloom.test").info("Ingested graph", extra={"nodes": 3, "version": 7})

        assert len(text_sink) == 1
        line = str(text_sink[0])
        assert "Ingested graph | nodes=3 version=7" in line
        assert line.endswith("\n")

    def test_message_without_context_unchanged(self, text_sink):
        get_logger("graphloom.test").info("Graph Engine ready")

        assert str(text_sink[0]).rstrip("\n").endswith("Graph Engine ready")

    def test_braces_in_context_values_are_literal(self, text_sink):
        get_logger("graphloom.test").info("Lookup", extra={"names": ["{a}"]})

        assert "names=['{a}']" in str(text_sink[0])

    def test_console_format_has_context_slot(self):
        record = {"extra": {"module": "graphloom.test", "extra": {"links": 2}}}

        template = console_format(record)

        assert record["extra"]["context"] == " | links=2"
        assert "{extra[context]}" in template
        assert template.endswith("\n{exception}")

    def test_serialized_sink_keeps_context(self):
        records = []
        handler_id = logger.add(records.append, serialize=True, level="DEBUG")
        try:
            get_logger("graphloom.test").warning("Refresh failed", extra={"error_type": "X"})
        finally:
            logger.remove(handler_id)

        payload = json.loads(str(records[0]))
        assert payload["record"]["extra"]["extra"] == {"error_type": "X"}
        assert payload["record"]["extra"]["module"] == "graphloom.test"
