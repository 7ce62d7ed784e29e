#!/usr/bin/env python3
# src/mcp_everything/schemas.py
"""
Schema Registry - declared input/output schemas per operation

Each operation (tool or prompt) declares a pydantic model for its input and,
when it produces structured results, a model for its output. The registry
serializes them as JSON Schema for discovery and validates raw arguments
against them, applying declared defaults.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ToolArguments(BaseModel):
    """Base for tool inputs: strict types, unknown keys dropped."""

    model_config = ConfigDict(strict=True, extra="ignore")


class PromptArguments(BaseModel):
    """Base for prompt inputs. Prompt arguments arrive as strings, so coercion is allowed."""

    model_config = ConfigDict(extra="ignore")


def _strip_titles(schema: Any) -> Any:
    """Remove pydantic's generated "title" keys, leaving property names intact."""
    if isinstance(schema, dict):
        cleaned: dict[str, Any] = {}
        for key, value in schema.items():
            if key == "title" and isinstance(value, str):
                continue
            if key == "properties" and isinstance(value, dict):
                cleaned[key] = {name: _strip_titles(prop) for name, prop in value.items()}
            else:
                cleaned[key] = _strip_titles(value)
        return cleaned
    if isinstance(schema, list):
        return [_strip_titles(item) for item in schema]
    return schema


def to_validation_error(exc: PydanticValidationError, prefix: str = "") -> ValidationError:
    """Convert the first pydantic error into a ValidationError{field, reason}."""
    errors = exc.errors()
    if not errors:
        return ValidationError(prefix or "arguments", str(exc))
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    field = ".".join(part for part in (prefix, location) if part) or "arguments"
    return ValidationError(field, first.get("msg", "invalid value"))


@dataclass(frozen=True)
class OperationSchema:
    """Input and optional output schema of one operation."""

    name: str
    input_model: type[BaseModel]
    output_model: type[BaseModel] | None = None

    def input_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = _strip_titles(self.input_model.model_json_schema())
        schema.setdefault("properties", {})
        return schema

    def output_schema(self) -> dict[str, Any] | None:
        if self.output_model is None:
            return None
        schema: dict[str, Any] = _strip_titles(self.output_model.model_json_schema())
        return schema


class SchemaRegistry:
    """Registry of operation schemas with validation."""

    def __init__(self) -> None:
        self._schemas: dict[str, OperationSchema] = {}

    def register(
        self,
        name: str,
        input_model: type[BaseModel],
        output_model: type[BaseModel] | None = None,
    ) -> OperationSchema:
        """Register the schemas of an operation."""
        schema = OperationSchema(name=name, input_model=input_model, output_model=output_model)
        self._schemas[name] = schema
        logger.debug(f"Registered schema: {name}")
        return schema

    def get(self, name: str) -> OperationSchema:
        try:
            return self._schemas[name]
        except KeyError:
            raise NotFoundError.named("operation", name, list(self._schemas)) from None

    def names(self) -> list[str]:
        return list(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def describe(self, name: str) -> dict[str, Any]:
        """Describe an operation's schemas for capability discovery."""
        schema = self.get(name)
        description: dict[str, Any] = {"inputSchema": schema.input_schema()}
        output_schema = schema.output_schema()
        if output_schema is not None:
            description["outputSchema"] = output_schema
        return description

    def validate(self, name: str, raw_args: Any) -> BaseModel:
        """Validate raw arguments against an operation's input schema.

        Missing optional fields receive their declared defaults.

        Raises:
            NotFoundError: If the operation is not registered.
            ValidationError: On type mismatch, missing required field or
                out-of-range value.
        """
        schema = self.get(name)
        if raw_args is None:
            raw_args = {}
        if not isinstance(raw_args, dict):
            raise ValidationError("arguments", f"must be an object, got {type(raw_args).__name__}")
        try:
            return schema.input_model.model_validate(raw_args)
        except PydanticValidationError as e:
            raise to_validation_error(e) from e

    def validate_output(self, name: str, value: Any) -> dict[str, Any]:
        """Validate a structured result against an operation's output schema.

        The payload is returned as given so it stays identical to any text
        rendering made from it.
        """
        schema = self.get(name)
        if schema.output_model is None:
            raise ValidationError("structuredContent", f"operation '{name}' declares no output schema")
        if not isinstance(value, dict):
            raise ValidationError("structuredContent", f"must be an object, got {type(value).__name__}")
        try:
            schema.output_model.model_validate(value)
        except PydanticValidationError as e:
            raise to_validation_error(e, prefix="structuredContent") from e
        return value

    def prompt_arguments(self, name: str) -> list[dict[str, Any]]:
        """Derive the prompt argument descriptors from an input model's fields."""
        schema = self.get(name)
        arguments = []
        for field_name, field in schema.input_model.model_fields.items():
            argument: dict[str, Any] = {"name": field_name, "required": field.is_required()}
            if field.description:
                argument["description"] = field.description
            arguments.append(argument)
        return arguments
