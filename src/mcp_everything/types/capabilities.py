#!/usr/bin/env python3
# src/mcp_everything/types/capabilities.py
"""
Capabilities - Server capability and identity creation

Helpers for creating the capability flags and server identity advertised
in the initialize result, using the MCP SDK types directly.
"""

from typing import Any

from mcp.types import (
    CompletionsCapability,
    Implementation,
    LoggingCapability,
    PromptsCapability,
    ResourcesCapability,
    ServerCapabilities,
    ToolsCapability,
)

from ..constants import SERVER_NAME, SERVER_TITLE, SERVER_VERSION


def create_server_capabilities(
    tools: bool = True,
    resources: bool = True,
    subscribe: bool = True,
    prompts: bool = True,
    logging: bool = True,
    completions: bool = True,
    experimental: dict[str, Any] | None = None,
) -> ServerCapabilities:
    """Create server capabilities using the MCP SDK types directly."""
    capabilities: dict[str, Any] = {}

    if tools:
        capabilities["tools"] = ToolsCapability()
    if resources:
        capabilities["resources"] = ResourcesCapability(subscribe=subscribe)
    if prompts:
        capabilities["prompts"] = PromptsCapability()
    if logging:
        capabilities["logging"] = LoggingCapability()
    if completions:
        capabilities["completions"] = CompletionsCapability()
    if experimental:
        capabilities["experimental"] = experimental

    return ServerCapabilities(**capabilities)


def capabilities_to_dict(capabilities: ServerCapabilities, elicitation: bool = True) -> dict[str, Any]:
    """Serialize capabilities for the initialize result.

    Elicitation is not a server capability in the SDK model, so the flag is
    merged in here.
    """
    result: dict[str, Any] = capabilities.model_dump(by_alias=True, exclude_none=True)
    if elicitation:
        result.setdefault("elicitation", {})
    return result


def create_server_info(
    name: str = SERVER_NAME,
    version: str = SERVER_VERSION,
    title: str | None = SERVER_TITLE,
) -> Implementation:
    """Create the server identity."""
    return Implementation(name=name, version=version, title=title)


__all__ = ["create_server_capabilities", "capabilities_to_dict", "create_server_info"]
