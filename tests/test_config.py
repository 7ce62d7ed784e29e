#!/usr/bin/env python3
"""Tests for server configuration."""

import pytest

from mcp_everything.config import (
    ENV_LOG_INTERVAL,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_SERVER_NAME,
    ENV_PEER_TIMEOUT,
    ENV_STDERR_INTERVAL,
    ENV_SUBSCRIPTION_INTERVAL,
    ServerConfig,
)


class TestDefaults:
    def test_defaults(self):
        config = ServerConfig()
        assert config.name == "example-servers/everything"
        assert config.version == "1.0.0"
        assert config.log_level == "WARNING"
        assert config.subscription_interval == 10.0
        assert config.log_interval == 20.0
        assert config.stderr_interval == 30.0
        assert config.peer_timeout == 120.0

    def test_empty_environment_gives_defaults(self):
        assert ServerConfig.from_env({}) == ServerConfig()


class TestFromEnv:
    def test_overrides(self):
        config = ServerConfig.from_env(
            {
                ENV_MCP_LOG_LEVEL: "debug",
                ENV_MCP_SERVER_NAME: "custom",
                ENV_SUBSCRIPTION_INTERVAL: "1.5",
                ENV_LOG_INTERVAL: "2",
                ENV_STDERR_INTERVAL: "3",
                ENV_PEER_TIMEOUT: "4",
            }
        )
        assert config.log_level == "DEBUG"
        assert config.name == "custom"
        assert config.subscription_interval == 1.5
        assert config.log_interval == 2.0
        assert config.stderr_interval == 3.0
        assert config.peer_timeout == 4.0

    def test_invalid_log_level_is_ignored(self):
        assert ServerConfig.from_env({ENV_MCP_LOG_LEVEL: "chatty"}).log_level == "WARNING"

    @pytest.mark.parametrize("raw", ["soon", "0", "-5"])
    def test_bad_intervals_are_ignored(self, raw):
        config = ServerConfig.from_env({ENV_LOG_INTERVAL: raw})
        assert config.log_interval == 20.0


class TestWithOverrides:
    def test_none_values_are_skipped(self):
        config = ServerConfig().with_overrides(log_level=None, peer_timeout=5.0)
        assert config.log_level == "WARNING"
        assert config.peer_timeout == 5.0

    def test_returns_a_copy(self):
        base = ServerConfig()
        assert base.with_overrides(log_level="DEBUG") is not base
        assert base.log_level == "WARNING"
