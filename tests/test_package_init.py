#!/usr/bin/env python3
"""Tests for the package's public surface."""

import mcp_everything


class TestPublicApi:
    def test_version_attribute(self):
        assert isinstance(mcp_everything.__version__, str)
        assert mcp_everything.__version__ == "1.0.0"

    def test_all_names_resolve(self):
        for name in mcp_everything.__all__:
            assert hasattr(mcp_everything, name), name

    def test_create_server(self):
        handler = mcp_everything.create_server()
        assert isinstance(handler, mcp_everything.MCPProtocolHandler)
        assert isinstance(handler.session, mcp_everything.EverythingSession)
        assert handler.server_info.name == "example-servers/everything"

    def test_create_server_honours_config(self):
        config = mcp_everything.ServerConfig(name="other", version="2.0.0", peer_timeout=1.0)
        handler = mcp_everything.create_server(config)
        assert handler.server_info.version == "2.0.0"
        assert handler.session.gateway.timeout == 1.0
