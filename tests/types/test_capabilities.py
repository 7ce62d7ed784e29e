#!/usr/bin/env python3
"""Tests for capability and identity helpers."""

from mcp_everything.types import capabilities_to_dict, create_server_capabilities, create_server_info


class TestCapabilities:
    def test_everything_enabled_by_default(self):
        result = capabilities_to_dict(create_server_capabilities())
        assert set(result) >= {"tools", "resources", "prompts", "logging", "completions", "elicitation"}
        assert result["resources"]["subscribe"] is True

    def test_disabled_capabilities_are_omitted(self):
        result = capabilities_to_dict(create_server_capabilities(tools=False, logging=False), elicitation=False)
        assert "tools" not in result
        assert "logging" not in result
        assert "elicitation" not in result

    def test_without_subscribe(self):
        result = capabilities_to_dict(create_server_capabilities(subscribe=False))
        assert result["resources"]["subscribe"] is False


class TestServerInfo:
    def test_defaults(self):
        info = create_server_info()
        assert info.name == "example-servers/everything"
        assert info.title == "Everything Example Server"
        assert info.version == "1.0.0"

    def test_custom(self):
        info = create_server_info(name="x", version="9", title=None)
        assert info.model_dump(exclude_none=True) == {"name": "x", "version": "9"}
