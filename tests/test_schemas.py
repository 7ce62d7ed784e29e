#!/usr/bin/env python3
"""Tests for the schema registry."""

import pytest
from pydantic import Field

from mcp_everything.errors import NotFoundError, ValidationError
from mcp_everything.schemas import PromptArguments, SchemaRegistry, ToolArguments
from mcp_everything.tools import (
    AddArgs,
    AnnotatedMessageArgs,
    GetResourceLinksArgs,
    LongRunningOperationArgs,
    StructuredContentArgs,
    WeatherOutput,
)


class CountArgs(ToolArguments):
    count: int = Field(default=3, ge=1, le=10, description="How many")


class NameArgs(PromptArguments):
    name: str = Field(description="Who to greet")
    greeting: str | None = Field(default=None, description="Greeting word")


@pytest.fixture
def registry():
    registry = SchemaRegistry()
    registry.register("add", AddArgs)
    registry.register("count", CountArgs)
    registry.register("longRunningOperation", LongRunningOperationArgs)
    registry.register("annotatedMessage", AnnotatedMessageArgs)
    registry.register("getResourceLinks", GetResourceLinksArgs)
    registry.register("structuredContent", StructuredContentArgs, WeatherOutput)
    registry.register("greet", NameArgs)
    return registry


class TestDescribe:
    def test_input_schema_has_no_titles(self, registry):
        schema = registry.describe("add")["inputSchema"]
        assert "title" not in schema
        assert schema["type"] == "object"
        assert schema["required"] == ["a", "b"]
        assert schema["properties"]["a"] == {"description": "First number", "type": "number"}

    def test_defaults_and_bounds_are_published(self, registry):
        props = registry.describe("count")["inputSchema"]["properties"]
        assert props["count"]["default"] == 3
        assert props["count"]["minimum"] == 1
        assert props["count"]["maximum"] == 10

    def test_empty_model_still_has_properties(self):
        registry = SchemaRegistry()
        registry.register("noop", ToolArguments)
        assert registry.describe("noop")["inputSchema"]["properties"] == {}

    def test_output_schema_only_when_declared(self, registry):
        assert "outputSchema" not in registry.describe("add")
        output = registry.describe("structuredContent")["outputSchema"]
        assert set(output["properties"]) == {"temperature", "conditions", "humidity"}
        assert output["properties"]["temperature"]["type"] == "number"
        assert output["properties"]["conditions"]["type"] == "string"

    def test_unknown_operation(self, registry):
        with pytest.raises(NotFoundError):
            registry.describe("missing")


class TestValidate:
    def test_applies_defaults(self, registry):
        args = registry.validate("longRunningOperation", {})
        assert args.duration == 10
        assert args.steps == 5

    def test_none_means_no_arguments(self, registry):
        assert registry.validate("getResourceLinks", None).count == 3

    def test_type_mismatch(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("add", {"a": "1", "b": 2})
        assert exc_info.value.field == "a"
        assert exc_info.value.code == -32602

    def test_missing_required_field(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("add", {"a": 1})
        assert exc_info.value.field == "b"

    @pytest.mark.parametrize("count", [0, 11])
    def test_numeric_bounds(self, registry, count):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("getResourceLinks", {"count": count})
        assert exc_info.value.field == "count"

    def test_enum_membership(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("annotatedMessage", {"messageType": "info"})
        assert exc_info.value.field == "messageType"

    def test_string_length_after_trimming(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("structuredContent", {"location": "   "})
        assert exc_info.value.field == "location"
        assert registry.validate("structuredContent", {"location": "  Paris "}).location == "Paris"

    def test_arguments_must_be_an_object(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate("add", [1, 2])
        assert exc_info.value.field == "arguments"

    def test_unknown_keys_are_ignored(self, registry):
        assert registry.validate("getResourceLinks", {"count": 2, "extra": True}).count == 2

    def test_prompt_arguments_coerce_strings(self):
        registry = SchemaRegistry()

        class IdArgs(PromptArguments):
            resourceId: int = Field(ge=1)

        registry.register("p", IdArgs)
        assert registry.validate("p", {"resourceId": "7"}).resourceId == 7


class TestValidateOutput:
    def test_returns_the_same_payload(self, registry):
        payload = {"temperature": 22.5, "conditions": "Partly cloudy", "humidity": 65}
        assert registry.validate_output("structuredContent", payload) is payload

    def test_rejects_mismatched_payload(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.validate_output("structuredContent", {"temperature": "warm", "conditions": "x", "humidity": 1})
        assert exc_info.value.field == "structuredContent.temperature"

    def test_operation_without_output_schema(self, registry):
        with pytest.raises(ValidationError):
            registry.validate_output("add", {})


class TestPromptArguments:
    def test_descriptors_from_model_fields(self, registry):
        assert registry.prompt_arguments("greet") == [
            {"name": "name", "required": True, "description": "Who to greet"},
            {"name": "greeting", "required": False, "description": "Greeting word"},
        ]
