#!/usr/bin/env python3
# src/mcp_everything/prompts.py
"""
Prompt Catalog - the three demonstration prompts
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from .constants import MIME_TYPE_PNG
from .errors import NotFoundError
from .images import MCP_TINY_IMAGE
from .resources import ResourceCatalog
from .schemas import PromptArguments, SchemaRegistry
from .types import embedded_resource, image_content, text_content

logger = logging.getLogger(__name__)


class PromptName:
    SIMPLE = "simple_prompt"
    COMPLEX = "complex_prompt"
    RESOURCE = "resource_prompt"


class SimplePromptArgs(PromptArguments):
    pass


class ComplexPromptArgs(PromptArguments):
    temperature: str = Field(description="Temperature setting")
    style: str | None = Field(default=None, description="Output style")


class ResourcePromptArgs(PromptArguments):
    resourceId: int = Field(ge=1, le=100, description="Resource ID to include (1-100)")


PromptRenderFn = Callable[[Any], list[dict[str, Any]]]


@dataclass(frozen=True)
class PromptDescriptor:
    name: str
    description: str
    input_model: type[BaseModel]
    render: PromptRenderFn


def _message(role: str, content: dict[str, Any]) -> dict[str, Any]:
    return {"role": role, "content": content}


class PromptCatalog:
    """Name-keyed table of prompts.

    Prompt arguments arrive as strings, so ``resourceId="7"`` is accepted
    and coerced; anything outside 1..100 is a ValidationError.
    """

    def __init__(self, resources: ResourceCatalog, registry: SchemaRegistry):
        self._resources = resources
        self._registry = registry
        self._prompts: dict[str, PromptDescriptor] = {}

        self.register(
            PromptDescriptor(PromptName.SIMPLE, "A prompt without arguments", SimplePromptArgs, self._render_simple)
        )
        self.register(
            PromptDescriptor(PromptName.COMPLEX, "A prompt with arguments", ComplexPromptArgs, self._render_complex)
        )
        self.register(
            PromptDescriptor(
                PromptName.RESOURCE,
                "A prompt that includes an embedded resource reference",
                ResourcePromptArgs,
                self._render_resource,
            )
        )

    def register(self, descriptor: PromptDescriptor) -> None:
        self._registry.register(descriptor.name, descriptor.input_model)
        self._prompts[descriptor.name] = descriptor
        logger.debug(f"Registered prompt: {descriptor.name}")

    def names(self) -> list[str]:
        return list(self._prompts)

    def get(self, name: Any) -> PromptDescriptor:
        if not isinstance(name, str) or name not in self._prompts:
            raise NotFoundError.named("prompt", str(name), self.names())
        return self._prompts[name]

    def list_prompts(self) -> list[dict[str, Any]]:
        prompts = []
        for descriptor in self._prompts.values():
            prompt: dict[str, Any] = {"name": descriptor.name, "description": descriptor.description}
            arguments = self._registry.prompt_arguments(descriptor.name)
            if arguments:
                prompt["arguments"] = arguments
            prompts.append(prompt)
        return prompts

    def validate(self, name: Any, raw_args: Any) -> BaseModel:
        descriptor = self.get(name)
        return self._registry.validate(descriptor.name, raw_args)

    def render(self, name: str, args: BaseModel) -> dict[str, Any]:
        descriptor = self.get(name)
        return {"description": descriptor.description, "messages": descriptor.render(args)}

    def get_prompt(self, name: Any, raw_args: Any = None) -> dict[str, Any]:
        """Validate the arguments and render the prompt's messages."""
        args = self.validate(name, raw_args)
        return self.render(name, args)

    def _render_simple(self, args: SimplePromptArgs) -> list[dict[str, Any]]:
        return [_message("user", text_content("This is a simple prompt without arguments."))]

    def _render_complex(self, args: ComplexPromptArgs) -> list[dict[str, Any]]:
        return [
            _message(
                "user",
                text_content(
                    f"This is a complex prompt with arguments: temperature={args.temperature}, style={args.style}"
                ),
            ),
            _message(
                "assistant",
                text_content(
                    "I understand. You've provided a complex prompt with temperature and style arguments. "
                    "How would you like me to proceed?"
                ),
            ),
            _message("user", image_content(MCP_TINY_IMAGE, MIME_TYPE_PNG)),
        ]

    def _render_resource(self, args: ResourcePromptArgs) -> list[dict[str, Any]]:
        resource = self._resources.get(args.resourceId)
        return [
            _message(
                "user",
                text_content(
                    f"This prompt includes Resource {args.resourceId}. Please analyze the following resource:"
                ),
            ),
            _message("user", embedded_resource(resource.to_mcp_format())),
        ]
