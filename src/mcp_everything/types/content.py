#!/usr/bin/env python3
# src/mcp_everything/types/content.py
"""
Content - Content block builders with orjson formatting

Builds the dict form of MCP content blocks (text, image, embedded resource,
resource link) from the MCP SDK's pydantic content types.
"""

from typing import Any

import orjson
from mcp.types import Annotations, ImageContent, TextContent


def _annotations(audience: list[str] | None, priority: float | None) -> Annotations | None:
    if audience is None and priority is None:
        return None
    return Annotations(audience=audience, priority=priority)  # type: ignore[arg-type]


def text_content(
    text: str,
    audience: list[str] | None = None,
    priority: float | None = None,
) -> dict[str, Any]:
    """Create a text content block, optionally annotated."""
    block = TextContent(type="text", text=text, annotations=_annotations(audience, priority))
    return block.model_dump(by_alias=True, exclude_none=True)


def image_content(
    data: str,
    mime_type: str,
    audience: list[str] | None = None,
    priority: float | None = None,
) -> dict[str, Any]:
    """Create an image content block from base64 data."""
    block = ImageContent(type="image", data=data, mimeType=mime_type, annotations=_annotations(audience, priority))
    return block.model_dump(by_alias=True, exclude_none=True)


def embedded_resource(resource: dict[str, Any]) -> dict[str, Any]:
    """Wrap resource contents (uri, mimeType, text|blob) as an embedded resource block."""
    return {"type": "resource", "resource": resource}


def create_resource_link(
    uri: str,
    name: str,
    description: str | None = None,
    mime_type: str | None = None,
) -> dict[str, Any]:
    """Create an MCP ResourceLink content block for inclusion in tool results.

    Args:
        uri: The resource URI.
        name: Human-readable name.
        description: Optional description.
        mime_type: Optional MIME type of the linked resource.

    Returns:
        A dict matching the MCP ResourceLink schema.
    """
    link: dict[str, Any] = {"type": "resource_link", "uri": uri, "name": name}
    if description is not None:
        link["description"] = description
    if mime_type is not None:
        link["mimeType"] = mime_type
    return link


def format_content_as_json(content: Any, indent: bool = True) -> str:
    """Format any JSON-serializable value as a JSON string with orjson."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(content, option=option).decode()  # type: ignore[no-any-return]


__all__ = [
    "text_content",
    "image_content",
    "embedded_resource",
    "create_resource_link",
    "format_content_as_json",
]
