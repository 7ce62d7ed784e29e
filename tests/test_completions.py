#!/usr/bin/env python3
"""Tests for argument completion."""

import pytest

from mcp_everything.completions import REF_PROMPT, REF_RESOURCE, CompletionRegistry
from mcp_everything.constants import McpMethod
from mcp_everything.testing import LoopbackPeer


@pytest.fixture
def registry():
    return CompletionRegistry()


def _prompt_ref(name: str = "complex_prompt") -> dict:
    return {"type": REF_PROMPT, "name": name}


class TestPromptCompletion:
    @pytest.mark.asyncio
    async def test_style_prefix(self, registry):
        result = await registry.complete(_prompt_ref(), {"name": "style", "value": "f"})
        assert result == {"values": ["formal", "friendly"], "hasMore": False, "total": 2}

    @pytest.mark.asyncio
    async def test_empty_value_returns_all(self, registry):
        result = await registry.complete(_prompt_ref(), {"name": "temperature", "value": ""})
        assert result["values"] == ["0", "0.5", "0.7", "1.0"]

    @pytest.mark.asyncio
    async def test_no_match(self, registry):
        result = await registry.complete(_prompt_ref(), {"name": "style", "value": "x"})
        assert result == {"values": [], "hasMore": False, "total": 0}

    @pytest.mark.asyncio
    async def test_unknown_argument(self, registry):
        result = await registry.complete(_prompt_ref(), {"name": "color", "value": ""})
        assert result["values"] == []

    @pytest.mark.asyncio
    async def test_unhashable_argument_name(self, registry):
        result = await registry.complete(_prompt_ref(), {"name": ["style"], "value": ""})
        assert result["values"] == []


class TestResourceCompletion:
    @pytest.mark.asyncio
    async def test_resource_ids(self, registry):
        ref = {"type": REF_RESOURCE, "uri": "test://static/resource/{id}"}
        result = await registry.complete(ref, {"name": "id", "value": "1"})
        assert result["values"] == ["1"]

    @pytest.mark.asyncio
    async def test_all_resource_ids(self, registry):
        ref = {"type": REF_RESOURCE, "uri": "test://static/resource/{id}"}
        result = await registry.complete(ref, {"name": "id", "value": ""})
        assert result["values"] == ["1", "2", "3", "4", "5"]

    @pytest.mark.asyncio
    async def test_uri_ending_in_slash(self, registry):
        ref = {"type": REF_RESOURCE, "uri": "test://static/resource/"}
        result = await registry.complete(ref, {"name": "id", "value": ""})
        assert result["values"] == []


class TestUnknownReference:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("ref", [{"type": "ref/tool"}, {}, None, {"type": ["ref/prompt"]}])
    async def test_empty_result(self, registry, ref):
        result = await registry.complete(ref, {"name": "style", "value": ""})
        assert result == {"values": [], "hasMore": False, "total": 0}


class TestCompletionOverProtocol:
    @pytest.mark.asyncio
    async def test_complete(self):
        peer = LoopbackPeer()
        await peer.initialize()
        response = await peer.request(
            McpMethod.COMPLETION_COMPLETE,
            {"ref": _prompt_ref(), "argument": {"name": "style", "value": "tech"}},
        )
        assert response["result"] == {"completion": {"values": ["technical"], "hasMore": False, "total": 1}}
        await peer.close()
