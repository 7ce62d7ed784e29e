#!/usr/bin/env python3
# src/mcp_everything/config.py
"""
Server configuration.

Defaults come from ``constants``; environment variables override them and
CLI flags override the environment.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any

from .constants import (
    LOG_MESSAGE_INTERVAL,
    PEER_REQUEST_TIMEOUT,
    SERVER_NAME,
    SERVER_VERSION,
    STDERR_MESSAGE_INTERVAL,
    SUBSCRIPTION_UPDATE_INTERVAL,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_MCP_SERVER_NAME = "MCP_SERVER_NAME"
ENV_MCP_SERVER_VERSION = "MCP_SERVER_VERSION"
ENV_SUBSCRIPTION_INTERVAL = "MCP_SUBSCRIPTION_INTERVAL"
ENV_LOG_INTERVAL = "MCP_LOG_INTERVAL"
ENV_STDERR_INTERVAL = "MCP_STDERR_INTERVAL"
ENV_PEER_TIMEOUT = "MCP_PEER_TIMEOUT"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """Runtime settings for one server process."""

    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    log_level: str = "WARNING"
    subscription_interval: float = SUBSCRIPTION_UPDATE_INTERVAL
    log_interval: float = LOG_MESSAGE_INTERVAL
    stderr_interval: float = STDERR_MESSAGE_INTERVAL
    peer_timeout: float = PEER_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ServerConfig":
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()

        log_level = env.get(ENV_MCP_LOG_LEVEL, defaults.log_level).upper()
        if log_level not in VALID_LOG_LEVELS:
            logger.warning(f"Ignoring invalid {ENV_MCP_LOG_LEVEL}={log_level!r}")
            log_level = defaults.log_level

        return cls(
            name=env.get(ENV_MCP_SERVER_NAME, defaults.name),
            version=env.get(ENV_MCP_SERVER_VERSION, defaults.version),
            log_level=log_level,
            subscription_interval=_positive_float(env, ENV_SUBSCRIPTION_INTERVAL, defaults.subscription_interval),
            log_interval=_positive_float(env, ENV_LOG_INTERVAL, defaults.log_interval),
            stderr_interval=_positive_float(env, ENV_STDERR_INTERVAL, defaults.stderr_interval),
            peer_timeout=_positive_float(env, ENV_PEER_TIMEOUT, defaults.peer_timeout),
        )

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _positive_float(env: Any, key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key}={raw!r}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {key}={raw!r}")
        return default
    return value
