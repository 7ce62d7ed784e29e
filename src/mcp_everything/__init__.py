#!/usr/bin/env python3
"""
mcp_everything - MCP reference server exercising every protocol feature

Resources with pagination and subscriptions, prompts, tools (including
progress, sampling, elicitation and structured content), completions and
log-level gated notifications, served over stdio:

    from mcp_everything import create_server, run_stdio_server

    run_stdio_server(create_server())
"""

from .config import ServerConfig
from .errors import MCPError, NotFoundError, PeerError, PeerTimeoutError, SessionClosedError, ValidationError
from .protocol import EverythingSession, MCPProtocolHandler
from .server import create_server
from .stdio_transport import StdioTransport, run_stdio_server
from .testing import LoopbackPeer

__version__ = "1.0.0"
__all__ = [
    "create_server",
    "run_stdio_server",
    "EverythingSession",
    "LoopbackPeer",
    "MCPProtocolHandler",
    "ServerConfig",
    "StdioTransport",
    "MCPError",
    "NotFoundError",
    "PeerError",
    "PeerTimeoutError",
    "SessionClosedError",
    "ValidationError",
]
