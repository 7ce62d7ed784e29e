#!/usr/bin/env python3
# src/mcp_everything/types/__init__.py
"""
Types package - content builders, capabilities and wire serialization.
"""

from .capabilities import capabilities_to_dict, create_server_capabilities, create_server_info
from .content import (
    create_resource_link,
    embedded_resource,
    format_content_as_json,
    image_content,
    text_content,
)
from .serialization import deserialize_message, serialize_message

__all__ = [
    "capabilities_to_dict",
    "create_server_capabilities",
    "create_server_info",
    "create_resource_link",
    "embedded_resource",
    "format_content_as_json",
    "image_content",
    "text_content",
    "deserialize_message",
    "serialize_message",
]
