#!/usr/bin/env python3
"""
Top-level constants shared across the mcp_everything package.
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"
KEY_META = "_meta"
KEY_PROGRESS_TOKEN = "progressToken"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# MCP error codes beyond JSON-RPC standard
MCP_ERROR_RESOURCE_NOT_FOUND = -32002


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION_2025_06 = "2025-06-18"
MCP_PROTOCOL_VERSION_2025_03 = "2025-03-26"
MCP_PROTOCOL_VERSION_2024_11 = "2024-11-05"
MCP_DEFAULT_PROTOCOL_VERSION = MCP_PROTOCOL_VERSION_2025_06
SUPPORTED_PROTOCOL_VERSIONS = (
    MCP_PROTOCOL_VERSION_2025_06,
    MCP_PROTOCOL_VERSION_2025_03,
    MCP_PROTOCOL_VERSION_2024_11,
)


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_SUBSCRIBE = "resources/subscribe"
    RESOURCES_UNSUBSCRIBE = "resources/unsubscribe"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    LOGGING_SET_LEVEL = "logging/setLevel"
    COMPLETION_COMPLETE = "completion/complete"
    SAMPLING_CREATE_MESSAGE = "sampling/createMessage"
    ELICITATION_CREATE = "elicitation/create"
    NOTIFICATIONS_CANCELLED = "notifications/cancelled"
    NOTIFICATIONS_PROGRESS = "notifications/progress"
    NOTIFICATIONS_MESSAGE = "notifications/message"
    NOTIFICATIONS_RESOURCES_UPDATED = "notifications/resources/updated"
    NOTIFICATIONS_STDERR = "notifications/stderr"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"
KEY_INSTRUCTIONS = "instructions"

# Client capability names
CAPABILITY_SAMPLING = "sampling"
CAPABILITY_ELICITATION = "elicitation"


# ---------------------------------------------------------------------------
# Logging level strings (ordered, lowest severity first)
# ---------------------------------------------------------------------------
LOG_DEBUG = "debug"
LOG_INFO = "info"
LOG_NOTICE = "notice"
LOG_WARNING = "warning"
LOG_ERROR = "error"
LOG_CRITICAL = "critical"
LOG_ALERT = "alert"
LOG_EMERGENCY = "emergency"

LOG_LEVELS = (
    LOG_DEBUG,
    LOG_INFO,
    LOG_NOTICE,
    LOG_WARNING,
    LOG_ERROR,
    LOG_CRITICAL,
    LOG_ALERT,
    LOG_EMERGENCY,
)

# Logger name attached to protocol log notifications
NOTIFICATION_LOGGER = "test-server"


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "example-servers/everything"
SERVER_TITLE = "Everything Example Server"
SERVER_VERSION = "1.0.0"
PACKAGE_LOGGER = "mcp_everything"
DEFAULT_ENCODING = "utf-8"


# ---------------------------------------------------------------------------
# Resource catalog and pagination
# ---------------------------------------------------------------------------
KEY_CURSOR = "cursor"
KEY_NEXT_CURSOR = "nextCursor"
PAGE_SIZE = 10
RESOURCE_COUNT = 100
RESOURCE_URI_PREFIX = "test://static/resource/"
RESOURCE_URI_TEMPLATE = RESOURCE_URI_PREFIX + "{id}"
MIME_TYPE_TEXT = "text/plain"
MIME_TYPE_BINARY = "application/octet-stream"
MIME_TYPE_PNG = "image/png"


# ---------------------------------------------------------------------------
# Background timers and peer requests (seconds)
# ---------------------------------------------------------------------------
SUBSCRIPTION_UPDATE_INTERVAL = 10.0
LOG_MESSAGE_INTERVAL = 20.0
STDERR_MESSAGE_INTERVAL = 30.0
PEER_REQUEST_TIMEOUT = 120.0
SHUTDOWN_TIMEOUT = 5.0


# ---------------------------------------------------------------------------
# Sampling defaults
# ---------------------------------------------------------------------------
SAMPLING_SYSTEM_PROMPT = "You are a helpful test server."
SAMPLING_TEMPERATURE = 0.7
SAMPLING_INCLUDE_CONTEXT = "thisServer"
SAMPLING_DEFAULT_MAX_TOKENS = 100


# ---------------------------------------------------------------------------
# Request validation limits
# ---------------------------------------------------------------------------
MAX_ARGUMENT_KEYS = 100
