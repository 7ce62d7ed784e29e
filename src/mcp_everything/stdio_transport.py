#!/usr/bin/env python3
# src/mcp_everything/stdio_transport.py
"""
STDIO Transport - MCP over newline-delimited JSON on stdin/stdout.

Inbound requests each run in their own task, so a handler suspended on a
sampling or elicitation round trip never stops the reader from picking up
the client's response. Responses from the client go straight to the peer
gateway. Writes to stdout are serialized by a lock.
"""

import asyncio
import logging
import sys
from typing import Any, TextIO

import orjson

from .constants import (
    DEFAULT_ENCODING,
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_RESULT,
    JsonRpcError,
)
from .protocol import MCPProtocolHandler
from .types import deserialize_message, serialize_message

logger = logging.getLogger(__name__)

# Largest single frame accepted on stdin
STDIO_LINE_LIMIT = 16 * 1024 * 1024


class StdioTransport:
    """
    Handle MCP protocol communication over stdio (stdin/stdout).
    """

    def __init__(
        self,
        protocol_handler: MCPProtocolHandler,
        reader: asyncio.StreamReader | None = None,
        writer: TextIO | None = None,
    ) -> None:
        """
        Initialize stdio transport.

        Args:
            protocol_handler: The MCP protocol handler instance
            reader: Stream to read frames from (defaults to stdin)
            writer: Text stream to write frames to (defaults to stdout)
        """
        self.protocol = protocol_handler
        self.reader = reader
        self.writer = writer
        self.running = False
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

        self.protocol.bind_transport(self._send_message)

    async def start(self) -> None:
        """Start the stdio transport and serve until stdin closes."""
        if self.reader is None:
            loop = asyncio.get_running_loop()
            self.reader = asyncio.StreamReader(limit=STDIO_LINE_LIMIT)
            protocol = asyncio.StreamReaderProtocol(self.reader)
            await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        if self.writer is None:
            self.writer = sys.stdout

        await self._listen()

    async def _listen(self) -> None:
        """Read frames until EOF, then shut the protocol handler down."""
        if self.reader is None:
            raise RuntimeError("stdio transport is not started")
        self.running = True
        try:
            while self.running:
                try:
                    line = await self.reader.readline()
                except ValueError as e:
                    logger.debug(f"Oversized stdio frame: {e}")
                    await self._send_error(None, JsonRpcError.PARSE_ERROR, "Parse error: frame too large")
                    continue
                if not line:
                    logger.debug("stdin closed")
                    break

                text = line.decode(DEFAULT_ENCODING, errors="replace").strip()
                if text:
                    await self._handle_line(text)
        finally:
            self.running = False
            await self.protocol.shutdown()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _handle_line(self, line: str) -> None:
        """
        Handle a single JSON-RPC frame.

        Client responses (no method key) resolve pending server-initiated
        requests; requests and notifications are dispatched in their own task.
        """
        try:
            message = deserialize_message(line)
        except (orjson.JSONDecodeError, ValueError) as e:
            logger.debug(f"Invalid JSON in stdio message: {e}")
            await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
            return

        if KEY_METHOD not in message:
            if KEY_ID in message and (KEY_RESULT in message or KEY_ERROR in message):
                self.protocol.handle_response(message)
            else:
                await self._send_error(message.get(KEY_ID), JsonRpcError.INVALID_REQUEST, "Invalid request")
            return

        task = asyncio.create_task(self._dispatch(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, message: dict[str, Any]) -> None:
        try:
            response = await self.protocol.handle_request(message)
            if response is not None:
                await self._send_message(response)
        except Exception as e:
            logger.error(f"Error dispatching stdio message: {e}", exc_info=True)

    async def _send_message(self, message: dict[str, Any]) -> None:
        """Write one frame to stdout. Raises if the stream is gone."""
        if self.writer is None:
            raise RuntimeError("stdio transport is not started")
        frame = serialize_message(message).decode(DEFAULT_ENCODING)
        async with self._write_lock:
            self.writer.write(frame + "\n")
            self.writer.flush()

    async def _send_error(self, request_id: Any, code: int, message: str) -> None:
        error_response = {
            JSONRPC_KEY: JSONRPC_VERSION,
            KEY_ID: request_id,
            KEY_ERROR: {"code": int(code), "message": message},
        }
        try:
            await self._send_message(error_response)
        except Exception as e:
            logger.error(f"Critical error sending stdio error frame: {e}")

    async def stop(self) -> None:
        """Stop the stdio transport."""
        self.running = False
        if self.reader:
            self.reader.feed_eof()


def run_stdio_server(protocol_handler: MCPProtocolHandler) -> None:
    """
    Run the MCP server in stdio mode until stdin closes.

    Args:
        protocol_handler: The MCP protocol handler instance
    """

    async def _run() -> None:
        transport = StdioTransport(protocol_handler)
        await transport.start()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.debug("stdio server interrupted")
