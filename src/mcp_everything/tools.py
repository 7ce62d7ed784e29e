#!/usr/bin/env python3
# src/mcp_everything/tools.py
"""
Tool Catalog - the demonstration tools and their schemas

Each tool is a ``ToolDescriptor`` in a name-keyed table: the pydantic model
for its arguments, an optional model for its structured output, and the
coroutine that runs it. Arguments are validated before the handler runs, so
handlers only ever see well-formed input.
"""

import asyncio
import itertools
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from .constants import MIME_TYPE_PNG, MIME_TYPE_TEXT, McpMethod
from .errors import NotFoundError, PeerError
from .images import MCP_TINY_IMAGE
from .resources import ResourceCatalog
from .schemas import SchemaRegistry, ToolArguments
from .types import (
    create_resource_link,
    embedded_resource,
    format_content_as_json,
    image_content,
    text_content,
)

if TYPE_CHECKING:
    from .protocol.session import EverythingSession

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


# ============================================================================
# Tool names
# ============================================================================


class ToolName:
    ECHO = "echo"
    ADD = "add"
    LONG_RUNNING_OPERATION = "longRunningOperation"
    PRINT_ENV = "printEnv"
    SAMPLE_LLM = "sampleLLM"
    GET_TINY_IMAGE = "getTinyImage"
    ANNOTATED_MESSAGE = "annotatedMessage"
    GET_RESOURCE_REFERENCE = "getResourceReference"
    ELICITATION = "startElicitation"
    GET_RESOURCE_LINKS = "getResourceLinks"
    STRUCTURED_CONTENT = "structuredContent"


# ============================================================================
# Argument and output models
# ============================================================================


class EchoArgs(ToolArguments):
    message: str = Field(description="Message to echo")


class AddArgs(ToolArguments):
    a: float = Field(description="First number")
    b: float = Field(description="Second number")


class LongRunningOperationArgs(ToolArguments):
    duration: float = Field(default=10, ge=0, description="Duration of the operation in seconds")
    steps: int = Field(default=5, ge=1, description="Number of steps in the operation")


class PrintEnvArgs(ToolArguments):
    pass


class SampleLLMArgs(ToolArguments):
    prompt: str = Field(description="The prompt to send to the LLM")
    maxTokens: int = Field(default=100, ge=1, description="Maximum number of tokens to generate")


class GetTinyImageArgs(ToolArguments):
    pass


class AnnotatedMessageArgs(ToolArguments):
    messageType: Literal["error", "success", "debug"] = Field(
        description="Type of message to demonstrate different annotation patterns"
    )
    includeImage: bool = Field(default=False, description="Whether to include an example image")


class GetResourceReferenceArgs(ToolArguments):
    resourceId: int = Field(ge=1, le=100, description="ID of the resource to reference (1-100)")


class StartElicitationArgs(ToolArguments):
    pass


class GetResourceLinksArgs(ToolArguments):
    count: int = Field(default=3, ge=1, le=10, description="Number of resource links to return (1-10)")


class StructuredContentArgs(ToolArguments):
    location: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        description="City name or zip code"
    )


class WeatherOutput(BaseModel):
    model_config = ConfigDict(strict=True)

    temperature: float = Field(description="Temperature in celsius")
    conditions: str = Field(description="Weather conditions description")
    humidity: float = Field(description="Humidity percentage")


FAVORITES_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "color": {"type": "string", "description": "Favorite color"},
        "number": {"type": "integer", "description": "Favorite number", "minimum": 1, "maximum": 100},
        "pets": {
            "type": "string",
            "enum": ["cats", "dogs", "birds", "fish", "reptiles"],
            "description": "Favorite pets",
        },
    },
}

WEATHER_REPORT: dict[str, Any] = {"temperature": 22.5, "conditions": "Partly cloudy", "humidity": 65}


# ============================================================================
# Descriptors
# ============================================================================


@dataclass
class ToolResult:
    """Content blocks plus an optional structured payload."""

    content: list[dict[str, Any]]
    structured_content: dict[str, Any] | None = None

    def to_mcp_format(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": self.content}
        if self.structured_content is not None:
            result["structuredContent"] = self.structured_content
        return result


@dataclass
class ToolContext:
    """Per-call state handed to a tool handler."""

    request_id: Any
    progress_token: str | int | None
    session: "EverythingSession"
    sleep: SleepFn = asyncio.sleep


ToolHandlerFn = Callable[[Any, ToolContext], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandlerFn
    output_model: type[BaseModel] | None = None


def _format_number(value: float) -> str:
    """Render whole floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ============================================================================
# Catalog
# ============================================================================


class ToolCatalog:
    """Name-keyed table of tools, validated through a SchemaRegistry."""

    def __init__(
        self,
        resources: ResourceCatalog,
        registry: SchemaRegistry,
        sleep: SleepFn = asyncio.sleep,
        environ: Mapping[str, str] | None = None,
    ):
        self._resources = resources
        self._registry = registry
        self.sleep = sleep
        self._environ = environ
        self._tools: dict[str, ToolDescriptor] = {}
        self._register_builtin_tools()

    def register(self, descriptor: ToolDescriptor) -> None:
        self._registry.register(descriptor.name, descriptor.input_model, descriptor.output_model)
        self._tools[descriptor.name] = descriptor
        logger.debug(f"Registered tool: {descriptor.name}")

    def _register_builtin_tools(self) -> None:
        for name, description, input_model, handler, output_model in (
            (ToolName.ECHO, "Echoes back the input", EchoArgs, self._echo, None),
            (ToolName.ADD, "Adds two numbers", AddArgs, self._add, None),
            (
                ToolName.LONG_RUNNING_OPERATION,
                "Demonstrates a long running operation with progress updates",
                LongRunningOperationArgs,
                self._long_running_operation,
                None,
            ),
            (
                ToolName.PRINT_ENV,
                "Prints all environment variables, helpful for debugging MCP server configuration",
                PrintEnvArgs,
                self._print_env,
                None,
            ),
            (
                ToolName.SAMPLE_LLM,
                "Samples from an LLM using MCP's sampling feature",
                SampleLLMArgs,
                self._sample_llm,
                None,
            ),
            (ToolName.GET_TINY_IMAGE, "Returns the MCP_TINY_IMAGE", GetTinyImageArgs, self._get_tiny_image, None),
            (
                ToolName.ANNOTATED_MESSAGE,
                "Demonstrates how annotations can be used to provide metadata about content",
                AnnotatedMessageArgs,
                self._annotated_message,
                None,
            ),
            (
                ToolName.GET_RESOURCE_REFERENCE,
                "Returns a resource reference that can be used by MCP clients",
                GetResourceReferenceArgs,
                self._get_resource_reference,
                None,
            ),
            (
                ToolName.ELICITATION,
                "Demonstrates the Elicitation feature by asking the user to provide information "
                "about their favorite color, number, and pets.",
                StartElicitationArgs,
                self._start_elicitation,
                None,
            ),
            (
                ToolName.GET_RESOURCE_LINKS,
                "Returns multiple resource links that reference different types of resources",
                GetResourceLinksArgs,
                self._get_resource_links,
                None,
            ),
            (
                ToolName.STRUCTURED_CONTENT,
                "Returns structured content along with an output schema for client data validation",
                StructuredContentArgs,
                self._structured_content,
                WeatherOutput,
            ),
        ):
            self.register(ToolDescriptor(name, description, input_model, handler, output_model))

    # ------------------------------------------------------------------
    # Lookup and discovery
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: Any) -> ToolDescriptor:
        if not isinstance(name, str) or name not in self._tools:
            raise NotFoundError.named("tool", str(name), self.names())
        return self._tools[name]

    def list_tools(self) -> list[dict[str, Any]]:
        """Tool descriptors in MCP format, in registration order."""
        tools = []
        for descriptor in self._tools.values():
            tool: dict[str, Any] = {"name": descriptor.name, "description": descriptor.description}
            tool.update(self._registry.describe(descriptor.name))
            tools.append(tool)
        return tools

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def validate(self, name: Any, raw_args: Any) -> BaseModel:
        """Resolve the tool and validate its arguments. Pure."""
        descriptor = self.get(name)
        return self._registry.validate(descriptor.name, raw_args)

    def make_context(self, request_id: Any, progress_token: str | int | None, session: "EverythingSession") -> ToolContext:
        return ToolContext(request_id=request_id, progress_token=progress_token, session=session, sleep=self.sleep)

    async def execute(self, name: str, args: BaseModel, context: ToolContext) -> ToolResult:
        """Run a tool on already validated arguments.

        A structured payload is checked against the tool's output model
        before it is returned.
        """
        descriptor = self.get(name)
        result = await descriptor.handler(args, context)
        if descriptor.output_model is not None and result.structured_content is not None:
            self._registry.validate_output(descriptor.name, result.structured_content)
        return result

    async def call(self, name: Any, raw_args: Any, context: ToolContext) -> ToolResult:
        args = self.validate(name, raw_args)
        return await self.execute(name, args, context)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _echo(self, args: EchoArgs, context: ToolContext) -> ToolResult:
        return ToolResult([text_content(f"Echo: {args.message}")])

    async def _add(self, args: AddArgs, context: ToolContext) -> ToolResult:
        total = args.a + args.b
        text = f"The sum of {_format_number(args.a)} and {_format_number(args.b)} is {_format_number(total)}."
        return ToolResult([text_content(text)])

    async def _long_running_operation(self, args: LongRunningOperationArgs, context: ToolContext) -> ToolResult:
        step_duration = args.duration / args.steps
        for step in range(1, args.steps + 1):
            await context.sleep(step_duration)
            if context.progress_token is not None:
                await context.session.notify(
                    McpMethod.NOTIFICATIONS_PROGRESS,
                    {"progress": step, "total": args.steps, "progressToken": context.progress_token},
                )
        text = (
            f"Long running operation completed. Duration: {_format_number(args.duration)} seconds, "
            f"Steps: {args.steps}."
        )
        return ToolResult([text_content(text)])

    async def _print_env(self, args: PrintEnvArgs, context: ToolContext) -> ToolResult:
        environ = os.environ if self._environ is None else self._environ
        return ToolResult([text_content(format_content_as_json(dict(environ)))])

    async def _sample_llm(self, args: SampleLLMArgs, context: ToolContext) -> ToolResult:
        result = await context.session.gateway.request_sampling(args.prompt, ToolName.SAMPLE_LLM, args.maxTokens)
        text = getattr(result.content, "text", None)
        if text is None:
            raise PeerError(f"Sampling returned {result.content.type} content, expected text")
        return ToolResult([text_content(f"LLM sampling result: {text}")])

    async def _get_tiny_image(self, args: GetTinyImageArgs, context: ToolContext) -> ToolResult:
        return ToolResult(
            [
                text_content("This is a tiny image:"),
                image_content(MCP_TINY_IMAGE, MIME_TYPE_PNG),
                text_content("The image above is the MCP tiny image."),
            ]
        )

    async def _annotated_message(self, args: AnnotatedMessageArgs, context: ToolContext) -> ToolResult:
        if args.messageType == "error":
            content = [text_content("Error: Operation failed", audience=["user", "assistant"], priority=1.0)]
        elif args.messageType == "success":
            content = [text_content("Operation completed successfully", audience=["user"], priority=0.7)]
        else:
            content = [
                text_content("Debug: Cache hit ratio 0.95, latency 150ms", audience=["assistant"], priority=0.3)
            ]

        if args.includeImage:
            content.append(image_content(MCP_TINY_IMAGE, MIME_TYPE_PNG, audience=["user"], priority=0.5))
        return ToolResult(content)

    async def _get_resource_reference(self, args: GetResourceReferenceArgs, context: ToolContext) -> ToolResult:
        resource = self._resources.get(args.resourceId)
        return ToolResult(
            [
                text_content(f"Returning resource reference for Resource {args.resourceId}:"),
                embedded_resource(resource.to_mcp_format()),
                text_content(f"You can access this resource using the URI: {resource.uri}"),
            ]
        )

    async def _start_elicitation(self, args: StartElicitationArgs, context: ToolContext) -> ToolResult:
        result = await context.session.gateway.request_elicitation("What are your favorite things?", FAVORITES_SCHEMA)

        content = []
        if result.action == "accept" and result.content:
            favorites = result.content
            content.append(text_content("✅ User provided their favorite things!"))
            content.append(
                text_content(
                    "Their favorites are:\n"
                    f"- Color: {favorites.get('color') or 'not specified'}\n"
                    f"- Number: {favorites.get('number') or 'not specified'}\n"
                    f"- Pets: {favorites.get('pets') or 'not specified'}"
                )
            )
        elif result.action == "decline":
            content.append(text_content("❌ User declined to provide their favorite things."))
        elif result.action == "cancel":
            content.append(text_content("⚠️ User cancelled the elicitation dialog."))

        raw = format_content_as_json(result.model_dump(by_alias=True, exclude_none=True))
        content.append(text_content(f"\nRaw result: {raw}"))
        return ToolResult(content)

    async def _get_resource_links(self, args: GetResourceLinksArgs, context: ToolContext) -> ToolResult:
        content = [
            text_content(
                f"Here are {args.count} resource links to resources available in this server "
                "(see full output in tool response if your client does not support resource_link yet):"
            )
        ]
        for number, resource in enumerate(itertools.islice(self._resources, args.count), start=1):
            kind = "plaintext resource" if resource.mime_type == MIME_TYPE_TEXT else "binary blob resource"
            content.append(
                create_resource_link(
                    uri=resource.uri,
                    name=resource.name,
                    description=f"Resource {number}: {kind}",
                    mime_type=resource.mime_type,
                )
            )
        return ToolResult(content)

    async def _structured_content(self, args: StructuredContentArgs, context: ToolContext) -> ToolResult:
        # Same report for every location.
        weather = dict(WEATHER_REPORT)
        return ToolResult([text_content(orjson.dumps(weather).decode())], structured_content=weather)
