#!/usr/bin/env python3
"""Tests for content block builders."""

import orjson

from mcp_everything.types import (
    create_resource_link,
    embedded_resource,
    format_content_as_json,
    image_content,
    text_content,
)


class TestTextContent:
    def test_plain(self):
        assert text_content("hello") == {"type": "text", "text": "hello"}

    def test_annotated(self):
        block = text_content("careful", audience=["user"], priority=0.7)
        assert block == {"type": "text", "text": "careful", "annotations": {"audience": ["user"], "priority": 0.7}}

    def test_priority_only(self):
        assert text_content("x", priority=0.1)["annotations"] == {"priority": 0.1}


class TestImageContent:
    def test_plain(self):
        assert image_content("AAAA", "image/png") == {"type": "image", "data": "AAAA", "mimeType": "image/png"}

    def test_annotated(self):
        block = image_content("AAAA", "image/png", audience=["user"], priority=0.5)
        assert block["annotations"] == {"audience": ["user"], "priority": 0.5}


class TestResourceBlocks:
    def test_embedded_resource(self):
        contents = {"uri": "test://static/resource/1", "mimeType": "text/plain", "text": "hi"}
        assert embedded_resource(contents) == {"type": "resource", "resource": contents}

    def test_resource_link(self):
        link = create_resource_link("test://static/resource/2", "Resource 2", "binary", "application/octet-stream")
        assert link == {
            "type": "resource_link",
            "uri": "test://static/resource/2",
            "name": "Resource 2",
            "description": "binary",
            "mimeType": "application/octet-stream",
        }

    def test_resource_link_optional_fields_omitted(self):
        assert create_resource_link("test://x", "x") == {"type": "resource_link", "uri": "test://x", "name": "x"}


class TestFormatContentAsJson:
    def test_indented(self):
        assert format_content_as_json({"a": 1}) == '{\n  "a": 1\n}'

    def test_compact(self):
        assert format_content_as_json({"a": [1, 2]}, indent=False) == '{"a":[1,2]}'

    def test_unicode_round_trips(self):
        assert orjson.loads(format_content_as_json({"emoji": "✅"})) == {"emoji": "✅"}
