"""Tests for structured errors and their messages."""

from mcp_everything.errors import (
    MCPError,
    NotFoundError,
    PeerError,
    PeerTimeoutError,
    SessionClosedError,
    ValidationError,
    format_unknown_name_error,
    suggest_name,
)


class TestSuggestName:
    """Tests for fuzzy name matching."""

    def test_close_misspelling(self):
        assert suggest_name("ecko", ["echo", "add", "printEnv"]) == "echo"

    def test_prompt_typo(self):
        assert suggest_name("simple_promt", ["simple_prompt", "complex_prompt"]) == "simple_prompt"

    def test_no_match_returns_none(self):
        assert suggest_name("xyz_unknown", ["echo", "add"]) is None

    def test_empty_list_returns_none(self):
        assert suggest_name("echo", []) is None


class TestFormatUnknownNameError:
    """Tests for unknown tool/prompt error formatting."""

    def test_with_suggestion(self):
        msg = format_unknown_name_error("tool", "ad", ["add", "echo"])
        assert msg == "Unknown tool: 'ad'. Did you mean 'add'?"

    def test_without_suggestion_lists_names(self):
        msg = format_unknown_name_error("prompt", "xyz", ["simple_prompt", "resource_prompt"])
        assert msg == "Unknown prompt: 'xyz'. Available prompts: resource_prompt, simple_prompt"

    def test_nothing_registered(self):
        assert "No tools are registered" in format_unknown_name_error("tool", "anything", [])

    def test_truncates_long_lists(self):
        names = [f"tool_{i:02d}" for i in range(20)]
        msg = format_unknown_name_error("tool", "zzz", names)
        assert msg.endswith("...")
        assert "tool_09" in msg
        assert "tool_10" not in msg


class TestErrorObjects:
    def test_mcp_error_defaults_to_internal(self):
        error = MCPError("broken")
        assert error.to_error() == {"code": -32603, "message": "broken"}

    def test_validation_error_carries_field(self):
        error = ValidationError("count", "must be <= 10")
        assert error.to_error() == {
            "code": -32602,
            "message": "Invalid parameter 'count': must be <= 10",
            "data": {"field": "count", "reason": "must be <= 10"},
        }

    def test_method_not_found(self):
        assert NotFoundError.method("nope").to_error() == {"code": -32601, "message": "Method not found: nope"}

    def test_resource_not_found(self):
        error = NotFoundError.resource("test://static/resource/0")
        assert error.code == -32002
        assert error.data == {"uri": "test://static/resource/0"}

    def test_unknown_name_is_invalid_params(self):
        assert NotFoundError.named("tool", "x", ["echo"]).code == -32602

    def test_peer_error_hierarchy(self):
        assert issubclass(PeerTimeoutError, PeerError)
        assert issubclass(SessionClosedError, PeerError)
        assert issubclass(PeerError, MCPError)
        assert PeerTimeoutError("late").code == -32603
