#!/usr/bin/env python3
"""
Tests for the CLI entry point.
"""

import logging
from unittest.mock import patch

import pytest

from mcp_everything.cli import build_parser, main, setup_logging
from mcp_everything.protocol import MCPProtocolHandler


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.debug is False
        assert args.log_level is None

    def test_log_level_is_case_insensitive(self):
        assert build_parser().parse_args(["--log-level", "debug"]).log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "chatty"])


class TestSetupLogging:
    def test_debug_flag_wins(self):
        with patch("mcp_everything.cli.logging.basicConfig") as basic_config:
            setup_logging(level="ERROR", debug=True)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
        assert logging.getLogger("mcp_everything").level == logging.DEBUG

    def test_named_level(self):
        with patch("mcp_everything.cli.logging.basicConfig") as basic_config:
            setup_logging(level="error")
        assert basic_config.call_args.kwargs["level"] == logging.ERROR


class TestMain:
    def test_runs_stdio_server(self):
        with (
            patch("mcp_everything.cli.run_stdio_server") as run,
            patch("mcp_everything.cli.setup_logging") as logging_setup,
        ):
            main([])

        logging_setup.assert_called_once()
        [handler] = run.call_args.args
        assert isinstance(handler, MCPProtocolHandler)

    def test_log_level_flag_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("MCP_LOG_LEVEL", "info")
        with (
            patch("mcp_everything.cli.run_stdio_server"),
            patch("mcp_everything.cli.setup_logging") as logging_setup,
        ):
            main(["--log-level", "error"])
        assert logging_setup.call_args.kwargs == {"level": "ERROR", "debug": False}

    def test_environment_log_level(self, monkeypatch):
        monkeypatch.setenv("MCP_LOG_LEVEL", "info")
        with (
            patch("mcp_everything.cli.run_stdio_server"),
            patch("mcp_everything.cli.setup_logging") as logging_setup,
        ):
            main(["--debug"])
        assert logging_setup.call_args.kwargs == {"level": "INFO", "debug": True}

    def test_server_name_from_environment(self, monkeypatch):
        monkeypatch.setenv("MCP_SERVER_NAME", "renamed")
        with patch("mcp_everything.cli.run_stdio_server") as run, patch("mcp_everything.cli.setup_logging"):
            main([])
        assert run.call_args.args[0].server_info.name == "renamed"
