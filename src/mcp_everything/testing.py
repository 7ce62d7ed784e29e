"""
Testing utilities for the everything server.

``LoopbackPeer`` stands in for an MCP client without any transport: it
drives requests through the protocol handler, records every frame the server
sends, and answers server-initiated requests (sampling, elicitation) through
a configurable responder.
"""

import inspect
import itertools
from collections.abc import Callable
from typing import Any

from .constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ERROR,
    KEY_ID,
    KEY_META,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_RESULT,
    MCP_DEFAULT_PROTOCOL_VERSION,
    McpMethod,
)
from .errors import MCPError
from .protocol import MCPProtocolHandler

# Returns the result for a server-initiated request, or None to never answer.
Responder = Callable[[str, dict[str, Any]], Any]


def sampling_result(text: str = "Sampled text", model: str = "test-model") -> dict[str, Any]:
    """A well-formed sampling/createMessage result."""
    return {
        "role": "assistant",
        "content": {"type": "text", "text": text},
        "model": model,
        "stopReason": "endTurn",
    }


class LoopbackPeer:
    """In-memory client for exercising a protocol handler.

    Usage:
        peer = LoopbackPeer(create_server(), responder=lambda m, p: sampling_result())
        await peer.initialize()
        response = await peer.call_tool("echo", {"message": "hi"})
        await peer.close()
    """

    def __init__(
        self,
        handler: MCPProtocolHandler | None = None,
        capabilities: dict[str, Any] | None = None,
        responder: Responder | None = None,
    ):
        if handler is None:
            from .server import create_server

            handler = create_server()
        self.handler = handler
        self.capabilities = {"sampling": {}, "elicitation": {}} if capabilities is None else capabilities
        self.responder = responder
        self.sent: list[dict[str, Any]] = []
        self._ids = itertools.count(1)

        handler.bind_transport(self._receive)

    async def _receive(self, message: dict[str, Any]) -> None:
        self.sent.append(message)
        if KEY_METHOD in message and KEY_ID in message:
            await self._answer(message)

    async def _answer(self, request: dict[str, Any]) -> None:
        if self.responder is None:
            return
        response: dict[str, Any] = {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request[KEY_ID]}
        try:
            result = self.responder(request[KEY_METHOD], request.get(KEY_PARAMS, {}))
            if inspect.isawaitable(result):
                result = await result
        except MCPError as e:
            response[KEY_ERROR] = e.to_error()
        else:
            if result is None:
                return
            response[KEY_RESULT] = result
        self.handler.handle_response(response)

    # ------------------------------------------------------------------
    # Driving the server
    # ------------------------------------------------------------------

    async def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a request and return the full JSON-RPC response."""
        request_id = f"test-{next(self._ids)}"
        message: dict[str, Any] = {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request_id, KEY_METHOD: method}
        if params is not None:
            message[KEY_PARAMS] = params
        response = await self.handler.handle_request(message)
        if response is None:
            raise RuntimeError(f"No response to {method}")
        return response

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        message: dict[str, Any] = {JSONRPC_KEY: JSONRPC_VERSION, KEY_METHOD: method}
        if params is not None:
            message[KEY_PARAMS] = params
        await self.handler.handle_request(message)

    async def initialize(self, initialized: bool = False) -> dict[str, Any]:
        """Run the initialize handshake.

        Args:
            initialized: Also send ``notifications/initialized``, which starts
                the session's background timers.
        """
        response = await self.request(
            McpMethod.INITIALIZE,
            {
                "protocolVersion": MCP_DEFAULT_PROTOCOL_VERSION,
                "capabilities": self.capabilities,
                "clientInfo": {"name": "loopback-peer", "version": "0.0.0"},
            },
        )
        if initialized:
            await self.notify(McpMethod.INITIALIZED)
        return response

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        progress_token: str | int | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"name": name, "arguments": arguments or {}}
        if progress_token is not None:
            params[KEY_META] = {"progressToken": progress_token}
        return await self.request(McpMethod.TOOLS_CALL, params)

    async def call_tool_text(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Call a tool and join its text content.

        Raises:
            RuntimeError: If the tool returns an error response.
        """
        response = await self.call_tool(name, arguments)
        if KEY_ERROR in response:
            raise RuntimeError(f"Tool error: {response[KEY_ERROR].get('message', response[KEY_ERROR])}")
        return "\n".join(item["text"] for item in response[KEY_RESULT]["content"] if item.get("type") == "text")

    async def close(self) -> None:
        await self.handler.shutdown()

    # ------------------------------------------------------------------
    # Inspecting what the server sent
    # ------------------------------------------------------------------

    def notifications(self, method: str | None = None) -> list[dict[str, Any]]:
        return [m for m in self.sent if KEY_ID not in m and (method is None or m.get(KEY_METHOD) == method)]

    def server_requests(self, method: str | None = None) -> list[dict[str, Any]]:
        return [m for m in self.sent if KEY_ID in m and (method is None or m.get(KEY_METHOD) == method)]
