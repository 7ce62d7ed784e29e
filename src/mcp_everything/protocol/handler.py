#!/usr/bin/env python3
# src/mcp_everything/protocol/handler.py
"""
Protocol Handler - Capability dispatcher for the everything server

Routes inbound JSON-RPC requests through a method table to the resource,
prompt, tool, completion and logging handlers, and notifications through a
second table. Every request ends in a result or a JSON-RPC error; nothing
but cancellation escapes ``handle_request``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp.types import Implementation, ServerCapabilities

from ..completions import CompletionRegistry
from ..config import ServerConfig
from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_CURSOR,
    KEY_ERROR,
    KEY_ID,
    KEY_INSTRUCTIONS,
    KEY_META,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROGRESS_TOKEN,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    MAX_ARGUMENT_KEYS,
    MCP_DEFAULT_PROTOCOL_VERSION,
    SHUTDOWN_TIMEOUT,
    SUPPORTED_PROTOCOL_VERSIONS,
    JsonRpcError,
    McpMethod,
)
from ..errors import MCPError, NotFoundError, ValidationError
from ..log_emitter import rank
from ..prompts import PromptCatalog
from ..resources import ResourceCatalog
from ..tools import ToolCatalog
from ..types import capabilities_to_dict
from .session import EverythingSession, SendFn

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = """\
This server exercises every feature of the Model Context Protocol.

- 100 static resources under test://static/resource/{id}, paginated 10 per page. \
Odd ids are text, even ids are binary. Subscribed resources receive an update \
notification every 10 seconds.
- Tools cover echo and arithmetic, progress notifications (longRunningOperation), \
sampling (sampleLLM), elicitation (startElicitation), images, annotations, \
embedded resources, resource links and structured content.
- Prompts: simple_prompt, complex_prompt (with completions for its arguments) \
and resource_prompt.
- A random log message is sent every 20 seconds, filtered by logging/setLevel. \
A notifications/stderr message is sent every 30 seconds.
"""


class RequestPhase(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class InFlightRequest:
    """Bookkeeping for one request that has not been answered yet."""

    request_id: Any
    method: str
    task: asyncio.Task[Any] | None = None
    phase: RequestPhase = RequestPhase.RECEIVED
    history: list[RequestPhase] = field(default_factory=lambda: [RequestPhase.RECEIVED])

    def advance(self, phase: RequestPhase) -> None:
        self.phase = phase
        self.history.append(phase)
        logger.debug(f"{self.method} (ID: {self.request_id}) -> {phase.value}")


RouteFn = Callable[[dict[str, Any], InFlightRequest], Awaitable[dict[str, Any]]]
NotificationFn = Callable[[dict[str, Any]], Awaitable[None]]


def _require_str(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(key, "must be a non-empty string")
    return value


def _advance_to_executing(request: InFlightRequest) -> None:
    request.advance(RequestPhase.VALIDATING)
    request.advance(RequestPhase.EXECUTING)


def _optional_dict(params: dict[str, Any], key: str) -> dict[str, Any]:
    value = params.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(key, f"must be an object, got {type(value).__name__}")
    if len(value) > MAX_ARGUMENT_KEYS:
        raise ValidationError(key, f"too many keys ({len(value)} > {MAX_ARGUMENT_KEYS})")
    return value


class MCPProtocolHandler:
    """Core MCP protocol handler for the everything server."""

    def __init__(
        self,
        server_info: Implementation,
        capabilities: ServerCapabilities,
        resources: ResourceCatalog,
        tools: ToolCatalog,
        prompts: PromptCatalog,
        completions: CompletionRegistry,
        config: ServerConfig | None = None,
        session_factory: Callable[[SendFn], EverythingSession] | None = None,
    ):
        self.server_info = server_info
        self.capabilities = capabilities
        self.config = config or ServerConfig()
        self.resources = resources
        self.tools = tools
        self.prompts = prompts
        self.completions = completions

        # Transport callback for frames to the client (set by the transport layer)
        self._send_to_client: SendFn | None = None

        factory = session_factory or (lambda send: EverythingSession(send, config=self.config))
        self.session = factory(self._send_outbound)

        # In-flight request tracking for cancellation support
        self._in_flight_requests: dict[Any, InFlightRequest] = {}

        self._routes: dict[str, RouteFn] = {
            McpMethod.INITIALIZE: self._handle_initialize,
            McpMethod.PING: self._handle_ping,
            McpMethod.RESOURCES_LIST: self._handle_resources_list,
            McpMethod.RESOURCES_TEMPLATES_LIST: self._handle_resources_templates_list,
            McpMethod.RESOURCES_READ: self._handle_resources_read,
            McpMethod.RESOURCES_SUBSCRIBE: self._handle_resources_subscribe,
            McpMethod.RESOURCES_UNSUBSCRIBE: self._handle_resources_unsubscribe,
            McpMethod.PROMPTS_LIST: self._handle_prompts_list,
            McpMethod.PROMPTS_GET: self._handle_prompts_get,
            McpMethod.TOOLS_LIST: self._handle_tools_list,
            McpMethod.TOOLS_CALL: self._handle_tools_call,
            McpMethod.COMPLETION_COMPLETE: self._handle_completion_complete,
            McpMethod.LOGGING_SET_LEVEL: self._handle_logging_set_level,
        }
        self._notifications: dict[str, NotificationFn] = {
            McpMethod.INITIALIZED: self._handle_initialized_notification,
            McpMethod.NOTIFICATIONS_CANCELLED: self._handle_cancelled_notification,
        }

        logger.debug("MCP protocol handler initialized")

    # ================================================================
    # Transport binding
    # ================================================================

    def bind_transport(self, send: SendFn) -> None:
        """Attach the coroutine that writes frames to the client."""
        self._send_to_client = send

    async def _send_outbound(self, message: dict[str, Any]) -> None:
        if self._send_to_client is None:
            raise RuntimeError("No transport attached")
        await self._send_to_client(message)

    def handle_response(self, message: dict[str, Any]) -> bool:
        """Route a client response to the pending server-initiated request."""
        return self.session.gateway.handle_response(message)

    @property
    def in_flight(self) -> dict[Any, InFlightRequest]:
        return dict(self._in_flight_requests)

    # ================================================================
    # Dispatch
    # ================================================================

    async def handle_request(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """Handle one inbound request or notification.

        Returns:
            The JSON-RPC response, or None for notifications.
        """
        method = message.get(KEY_METHOD)
        params = message.get(KEY_PARAMS)
        if params is None:
            params = {}

        if KEY_ID not in message:
            await self._handle_notification(method, params)
            return None

        msg_id = message.get(KEY_ID)
        if isinstance(msg_id, bool) or not isinstance(msg_id, (str, int)):
            return self._create_error_response(None, JsonRpcError.INVALID_REQUEST, "Invalid request id")
        if not isinstance(method, str):
            return self._create_error_response(msg_id, JsonRpcError.INVALID_REQUEST, "Missing method")
        if not isinstance(params, dict):
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "params must be an object")

        logger.debug(f"Handling {method} (ID: {msg_id})")
        request = InFlightRequest(request_id=msg_id, method=method, task=asyncio.current_task())
        self._in_flight_requests[msg_id] = request

        try:
            route = self._routes.get(method)
            if route is None:
                raise NotFoundError.method(method)
            result = await route(params, request)
            request.advance(RequestPhase.COMPLETED)
            return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

        except asyncio.CancelledError:
            request.advance(RequestPhase.FAILED)
            raise  # Never swallow cancellation
        except MCPError as e:
            request.advance(RequestPhase.FAILED)
            logger.debug(f"{method} (ID: {msg_id}) failed: {e.message}")
            return self._create_error_response(msg_id, e.code, e.message, e.data)
        except Exception as e:
            request.advance(RequestPhase.FAILED)
            logger.error(f"Error handling {method}: {e}", exc_info=True)
            return self._create_error_response(
                msg_id, JsonRpcError.INTERNAL_ERROR, f"Internal error: {type(e).__name__}: {e}"
            )
        finally:
            if self._in_flight_requests.get(msg_id) is request:
                del self._in_flight_requests[msg_id]

    async def _handle_notification(self, method: Any, params: Any) -> None:
        handler = self._notifications.get(method) if isinstance(method, str) else None
        if handler is None:
            logger.debug(f"Ignoring notification: {method}")
            return
        try:
            await handler(params if isinstance(params, dict) else {})
        except Exception as e:
            logger.warning(f"Error handling notification {method}: {e}")

    # ================================================================
    # Lifecycle
    # ================================================================

    async def _handle_initialize(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        client_info = params.get(KEY_CLIENT_INFO) or {}
        client_capabilities = params.get(KEY_CAPABILITIES) or {}
        if not isinstance(client_info, dict):
            raise ValidationError(KEY_CLIENT_INFO, "must be an object")
        if not isinstance(client_capabilities, dict):
            raise ValidationError(KEY_CAPABILITIES, "must be an object")
        requested_version = params.get(KEY_PROTOCOL_VERSION)
        if requested_version in SUPPORTED_PROTOCOL_VERSIONS:
            protocol_version = requested_version
        else:
            protocol_version = MCP_DEFAULT_PROTOCOL_VERSION

        request.advance(RequestPhase.EXECUTING)
        self.session.initialize(client_info, protocol_version, client_capabilities)

        client_name = client_info.get("name", "unknown")
        logger.debug(
            f"Initialized session for {client_name} (v{protocol_version}, "
            f"sampling={'yes' if 'sampling' in client_capabilities else 'no'}, "
            f"elicitation={'yes' if 'elicitation' in client_capabilities else 'no'})"
        )
        return {
            KEY_PROTOCOL_VERSION: protocol_version,
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
            KEY_CAPABILITIES: capabilities_to_dict(self.capabilities),
            KEY_INSTRUCTIONS: SERVER_INSTRUCTIONS,
        }

    async def _handle_initialized_notification(self, params: dict[str, Any]) -> None:
        logger.debug("Initialized notification received")
        self.session.start_timers()

    async def _handle_ping(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        _advance_to_executing(request)
        return {}

    async def _handle_cancelled_notification(self, params: dict[str, Any]) -> None:
        """Cancel the in-flight request named by ``requestId``."""
        request_id = params.get("requestId")
        reason = params.get("reason", "")
        if request_id is None or isinstance(request_id, (dict, list)):
            logger.debug("Received cancelled notification without requestId")
            return

        request = self._in_flight_requests.pop(request_id, None)
        if request is not None and request.task is not None:
            request.task.cancel()
            logger.debug(f"Cancelled request {request_id}" + (f": {reason}" if reason else ""))
        else:
            logger.debug(f"Cancelled notification for unknown request {request_id}")

    async def shutdown(self, timeout: float = SHUTDOWN_TIMEOUT) -> None:
        """Shut down: close the session, then drain or cancel in-flight requests.

        Closing the session first fails any pending peer round trips, so
        handlers waiting on the client finish with an error instead of
        hanging until the timeout.
        """
        await self.session.close("Server shutting down")

        current = asyncio.current_task()
        tasks = [
            r.task
            for r in self._in_flight_requests.values()
            if r.task is not None and r.task is not current and not r.task.done()
        ]
        if tasks:
            logger.debug(f"Waiting for {len(tasks)} in-flight requests (timeout={timeout}s)")
            done, pending = await asyncio.wait(tasks, timeout=timeout)
            for t in pending:
                t.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(f"Shutdown: {len(done)} completed, {len(pending)} cancelled")

        self._in_flight_requests.clear()
        logger.debug("Protocol handler shut down")

    # ================================================================
    # Resources
    # ================================================================

    async def _handle_resources_list(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        cursor = params.get(KEY_CURSOR)
        request.advance(RequestPhase.EXECUTING)
        return self.resources.list_page(cursor)

    async def _handle_resources_templates_list(
        self, params: dict[str, Any], request: InFlightRequest
    ) -> dict[str, Any]:
        _advance_to_executing(request)
        return {"resourceTemplates": self.resources.list_templates()}

    async def _handle_resources_read(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        uri = _require_str(params, "uri")
        request.advance(RequestPhase.EXECUTING)
        resource = self.resources.read(uri)
        return {"contents": [resource.to_mcp_format()]}

    async def _handle_resources_subscribe(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        uri = _require_str(params, "uri")
        request.advance(RequestPhase.EXECUTING)
        await self.session.subscriptions.subscribe(uri)
        return {}

    async def _handle_resources_unsubscribe(
        self, params: dict[str, Any], request: InFlightRequest
    ) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        uri = _require_str(params, "uri")
        request.advance(RequestPhase.EXECUTING)
        await self.session.subscriptions.unsubscribe(uri)
        return {}

    # ================================================================
    # Prompts
    # ================================================================

    async def _handle_prompts_list(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        _advance_to_executing(request)
        return {"prompts": self.prompts.list_prompts()}

    async def _handle_prompts_get(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        name = _require_str(params, "name")
        arguments = _optional_dict(params, "arguments")
        args = self.prompts.validate(name, arguments)
        request.advance(RequestPhase.EXECUTING)
        return self.prompts.render(name, args)

    # ================================================================
    # Tools
    # ================================================================

    async def _handle_tools_list(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        _advance_to_executing(request)
        return {"tools": self.tools.list_tools()}

    async def _handle_tools_call(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        name = _require_str(params, "name")
        arguments = _optional_dict(params, "arguments")
        meta = _optional_dict(params, KEY_META)
        progress_token = meta.get(KEY_PROGRESS_TOKEN)
        if isinstance(progress_token, bool) or not isinstance(progress_token, (str, int, type(None))):
            raise ValidationError(KEY_PROGRESS_TOKEN, "must be a string or an integer")
        args = self.tools.validate(name, arguments)

        request.advance(RequestPhase.EXECUTING)
        context = self.tools.make_context(request.request_id, progress_token, self.session)
        result = await self.tools.execute(name, args, context)
        return result.to_mcp_format()

    # ================================================================
    # Completion and logging
    # ================================================================

    async def _handle_completion_complete(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        _advance_to_executing(request)
        completion = await self.completions.complete(params.get("ref"), params.get("argument"))
        return {"completion": completion}

    async def _handle_logging_set_level(self, params: dict[str, Any], request: InFlightRequest) -> dict[str, Any]:
        request.advance(RequestPhase.VALIDATING)
        level = params.get("level")
        if not isinstance(level, str):
            raise ValidationError("level", f"must be a string, got {type(level).__name__}")
        rank(level)
        request.advance(RequestPhase.EXECUTING)
        await self.session.log_emitter.set_level(level)
        return {}

    def _create_error_response(
        self, msg_id: Any, code: int, message: str, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create error response."""
        error: dict[str, Any] = {"code": int(code), "message": message}
        if data is not None:
            error["data"] = data
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: error}
