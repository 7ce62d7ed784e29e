#!/usr/bin/env python3
# src/mcp_everything/server.py
"""
Server assembly - wires catalogs, session and dispatcher together.
"""

import asyncio
import logging
import random
from collections.abc import Mapping

from .completions import CompletionRegistry
from .config import ServerConfig
from .constants import SERVER_TITLE
from .prompts import PromptCatalog
from .protocol import EverythingSession, MCPProtocolHandler
from .resources import ResourceCatalog
from .schemas import SchemaRegistry
from .tools import SleepFn, ToolCatalog
from .types import create_server_capabilities, create_server_info

logger = logging.getLogger(__name__)


def create_server(
    config: ServerConfig | None = None,
    sleep: SleepFn = asyncio.sleep,
    rng: random.Random | None = None,
    environ: Mapping[str, str] | None = None,
) -> MCPProtocolHandler:
    """Build a ready-to-serve protocol handler.

    Args:
        config: Runtime settings; defaults to ``ServerConfig()``.
        sleep: Delay function used by longRunningOperation.
        rng: Random source for the periodic log messages.
        environ: Environment shown by printEnv; defaults to ``os.environ``.
    """
    config = config or ServerConfig()
    registry = SchemaRegistry()
    resources = ResourceCatalog()

    handler = MCPProtocolHandler(
        server_info=create_server_info(name=config.name, version=config.version, title=SERVER_TITLE),
        capabilities=create_server_capabilities(),
        resources=resources,
        tools=ToolCatalog(resources, registry, sleep=sleep, environ=environ),
        prompts=PromptCatalog(resources, registry),
        completions=CompletionRegistry(),
        config=config,
        session_factory=lambda send: EverythingSession(send, config=config, rng=rng),
    )
    logger.debug(f"Created {config.name} v{config.version}")
    return handler
