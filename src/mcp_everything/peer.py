#!/usr/bin/env python3
# src/mcp_everything/peer.py
"""
Peer Request Gateway - server-initiated requests to the client

Sampling and elicitation are requests that travel the other way: the server
sends them and suspends the issuing handler until the client answers. Each
outstanding request is a future in a pending table keyed by its JSON-RPC id,
resolved when the transport hands the matching response back through
``handle_response``. Many requests may be pending at once; each one succeeds,
fails or times out on its own.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import CreateMessageResult, ElicitResult
from pydantic import ValidationError as PydanticValidationError

from .constants import (
    CAPABILITY_ELICITATION,
    CAPABILITY_SAMPLING,
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_RESULT,
    PEER_REQUEST_TIMEOUT,
    SAMPLING_DEFAULT_MAX_TOKENS,
    SAMPLING_INCLUDE_CONTEXT,
    SAMPLING_SYSTEM_PROMPT,
    SAMPLING_TEMPERATURE,
    McpMethod,
)
from .errors import MCPError, PeerError, PeerTimeoutError, SessionClosedError

logger = logging.getLogger(__name__)

SendFn = Callable[[dict[str, Any]], Awaitable[None]]


class PeerRequestGateway:
    """Issues requests to the peer and correlates their responses."""

    def __init__(self, send: SendFn, timeout: float = PEER_REQUEST_TIMEOUT):
        self._send = send
        self.timeout = timeout
        self.client_capabilities: dict[str, Any] = {}
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._closed = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def client_supports(self, capability: str) -> bool:
        """Whether the client advertised ``capability`` at initialize."""
        return self.client_capabilities.get(capability) is not None

    async def request(self, method: str, params: dict[str, Any], prefix: str = "request") -> dict[str, Any]:
        """Send a request to the peer and wait for its result.

        Returns:
            The ``result`` object of the peer's response.

        Raises:
            SessionClosedError: If the gateway is closed, before or while waiting.
            PeerTimeoutError: If no response arrives within ``timeout`` seconds.
            PeerError: If sending fails or the peer answers with an error.
        """
        if self._closed:
            raise SessionClosedError(f"Session closed; cannot send {method}")

        request_id = f"{prefix}-{uuid.uuid4().hex[:12]}"
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        request = {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request_id, KEY_METHOD: method, KEY_PARAMS: params}

        try:
            try:
                await self._send(request)
            except MCPError:
                raise
            except Exception as e:
                raise PeerError(f"Failed to send {method}: {e}") from e

            logger.debug(f"Awaiting {method} response (ID: {request_id})")
            try:
                response = await asyncio.wait_for(future, timeout=self.timeout)
            except TimeoutError:
                raise PeerTimeoutError(
                    f"{method} timed out after {self.timeout}s", data={"requestId": request_id}
                ) from None
        finally:
            self._pending.pop(request_id, None)

        if KEY_ERROR in response:
            error = response[KEY_ERROR] if isinstance(response[KEY_ERROR], dict) else {}
            raise PeerError(
                f"{method} request failed: {error.get('message', 'Unknown error')}",
                data={"requestId": request_id, "code": error.get("code")},
            )

        result = response.get(KEY_RESULT)
        if not isinstance(result, dict):
            raise PeerError(f"{method} response carried no result object", data={"requestId": request_id})
        return result

    def handle_response(self, message: dict[str, Any]) -> bool:
        """Resolve the pending request that ``message`` answers.

        Returns:
            True if a pending request was resolved, False if the id is unknown.
        """
        request_id = message.get(KEY_ID)
        future = self._pending.get(request_id) if isinstance(request_id, str) else None
        if future is None or future.done():
            logger.debug(f"Ignoring response for unknown request {request_id}")
            return False
        future.set_result(message)
        return True

    async def request_sampling(
        self,
        context: str,
        origin_uri: str,
        max_tokens: int = SAMPLING_DEFAULT_MAX_TOKENS,
    ) -> CreateMessageResult:
        """Ask the client's model for a completion about ``context``.

        Raises:
            PeerError: If the client does not support sampling, the request
                fails, or the result is not a valid CreateMessageResult.
        """
        if not self.client_supports(CAPABILITY_SAMPLING):
            raise PeerError("Client does not support sampling")

        params: dict[str, Any] = {
            "messages": [
                {
                    "role": "user",
                    "content": {"type": "text", "text": f"Resource {origin_uri} context: {context}"},
                }
            ],
            "systemPrompt": SAMPLING_SYSTEM_PROMPT,
            "maxTokens": max_tokens,
            "temperature": SAMPLING_TEMPERATURE,
            "includeContext": SAMPLING_INCLUDE_CONTEXT,
        }
        result = await self.request(McpMethod.SAMPLING_CREATE_MESSAGE, params, prefix="sampling")
        try:
            return CreateMessageResult.model_validate(result)
        except PydanticValidationError as e:
            raise PeerError(f"Malformed sampling result: {e.errors()[0]['msg']}") from e

    async def request_elicitation(self, message: str, requested_schema: dict[str, Any]) -> ElicitResult:
        """Ask the client to collect structured input from its user.

        ``content`` on the returned result is only defined when ``action`` is
        ``"accept"``.

        Raises:
            PeerError: If the client does not support elicitation, the request
                fails, or the result is not a valid ElicitResult.
        """
        if not self.client_supports(CAPABILITY_ELICITATION):
            raise PeerError("Client does not support elicitation")

        params = {"message": message, "requestedSchema": requested_schema}
        result = await self.request(McpMethod.ELICITATION_CREATE, params, prefix="elicit")
        try:
            return ElicitResult.model_validate(result)
        except PydanticValidationError as e:
            raise PeerError(f"Malformed elicitation result: {e.errors()[0]['msg']}") from e

    def close(self, reason: str = "Session closed") -> None:
        """Fail every outstanding request and refuse new ones."""
        self._closed = True
        pending = list(self._pending.items())
        self._pending.clear()
        for request_id, future in pending:
            if not future.done():
                future.set_exception(SessionClosedError(reason, data={"requestId": request_id}))
        if pending:
            logger.debug(f"Failed {len(pending)} pending peer request(s): {reason}")
