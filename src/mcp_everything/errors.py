"""
Structured error types for the everything server.

Every failure a request can end in is one of these. The dispatcher turns
them into JSON-RPC error objects; anything else is an internal error.
"""

from difflib import get_close_matches
from typing import Any

from .constants import MCP_ERROR_RESOURCE_NOT_FOUND, JsonRpcError


class MCPError(Exception):
    """Base error carrying a JSON-RPC error code and optional data."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        data: dict[str, Any] | None = None,
    ):
        self.code = int(code)
        self.message = message
        self.data = data
        super().__init__(message)

    def to_error(self) -> dict[str, Any]:
        """Format as a JSON-RPC error object."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ValidationError(MCPError):
    """Malformed or out-of-range input."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid parameter '{field}': {reason}",
            code=JsonRpcError.INVALID_PARAMS,
            data={"field": field, "reason": reason},
        )


class NotFoundError(MCPError):
    """Unknown method, tool, prompt or resource."""

    def __init__(self, message: str, code: int = JsonRpcError.METHOD_NOT_FOUND, data: dict[str, Any] | None = None):
        super().__init__(message, code=code, data=data)

    @classmethod
    def method(cls, method: str | None) -> "NotFoundError":
        return cls(f"Method not found: {method}")

    @classmethod
    def resource(cls, uri: str) -> "NotFoundError":
        return cls(f"Unknown resource: {uri}", code=MCP_ERROR_RESOURCE_NOT_FOUND, data={"uri": uri})

    @classmethod
    def named(cls, kind: str, name: str, available: list[str]) -> "NotFoundError":
        return cls(format_unknown_name_error(kind, name, available), code=JsonRpcError.INVALID_PARAMS)


class PeerError(MCPError):
    """A server-initiated request to the peer failed."""

    def __init__(self, message: str, data: dict[str, Any] | None = None):
        super().__init__(message, code=JsonRpcError.INTERNAL_ERROR, data=data)


class PeerTimeoutError(PeerError):
    """The peer never answered within the bounded wait."""


class SessionClosedError(PeerError):
    """The session shut down while the request was outstanding."""


def suggest_name(name: str, available: list[str]) -> str | None:
    """Find the closest matching name using fuzzy matching.

    Args:
        name: The unknown name.
        available: List of registered names.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(name, available, n=1, cutoff=0.6)
    return matches[0] if matches else None


def format_unknown_name_error(kind: str, name: str, available: list[str]) -> str:
    """Create an error message for an unknown tool or prompt with suggestions.

    Args:
        kind: What was looked up ("tool", "prompt").
        name: The requested name.
        available: List of registered names.

    Returns:
        Error message string, potentially with a suggestion.
    """
    suggestion = suggest_name(name, available)
    if suggestion:
        return f"Unknown {kind}: '{name}'. Did you mean '{suggestion}'?"
    if available:
        names = ", ".join(sorted(available)[:10])
        suffix = "..." if len(available) > 10 else ""
        return f"Unknown {kind}: '{name}'. Available {kind}s: {names}{suffix}"
    return f"Unknown {kind}: '{name}'. No {kind}s are registered."
