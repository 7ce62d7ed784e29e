#!/usr/bin/env python3
# src/mcp_everything/protocol/__init__.py
"""
MCP protocol package.

The dispatcher and the per-connection session state it drives.
"""

from .handler import InFlightRequest, MCPProtocolHandler, RequestPhase
from .session import EverythingSession

__all__ = [
    "EverythingSession",
    "InFlightRequest",
    "MCPProtocolHandler",
    "RequestPhase",
]
