#!/usr/bin/env python3
# src/mcp_everything/cli.py
"""
CLI entry point for the everything server.

Runs the server over stdio. Process diagnostics go to stderr so stdout
carries nothing but protocol frames.
"""

import argparse
import logging
import sys

from .config import VALID_LOG_LEVELS, ServerConfig
from .constants import PACKAGE_LOGGER
from .server import create_server
from .stdio_transport import run_stdio_server


def setup_logging(level: str = "WARNING", debug: bool = False) -> None:
    """Set up logging configuration on stderr."""
    resolved = logging.DEBUG if debug else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=resolved, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-everything",
        description="MCP reference server exercising every protocol feature over stdio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run for an MCP client
  mcp-everything

  # Run with debug logging on stderr
  mcp-everything --debug

Environment Variables:
  MCP_LOG_LEVEL              Logging level (debug|info|warning|error|critical)
  MCP_SERVER_NAME            Server name (default: example-servers/everything)
  MCP_SERVER_VERSION         Server version (default: 1.0.0)
  MCP_SUBSCRIPTION_INTERVAL  Seconds between resource update notifications (default: 10)
  MCP_LOG_INTERVAL           Seconds between random log messages (default: 20)
  MCP_STDERR_INTERVAL        Seconds between stderr notifications (default: 30)
  MCP_PEER_TIMEOUT           Seconds to wait for sampling/elicitation answers (default: 120)
        """,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        help="Logging level (default: warning, or MCP_LOG_LEVEL)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = ServerConfig.from_env().with_overrides(log_level=args.log_level)
    setup_logging(level=config.log_level, debug=args.debug)

    logging.getLogger(__name__).info(f"Starting {config.name} v{config.version} in STDIO mode")
    run_stdio_server(create_server(config))


if __name__ == "__main__":
    main()
