#!/usr/bin/env python3
"""
Serialization - orjson wire encoding for JSON-RPC frames
"""

from typing import Any

import orjson


def serialize_message(message: dict[str, Any]) -> bytes:
    """Serialize a JSON-RPC message with orjson."""
    result: bytes = orjson.dumps(message)
    return result


def deserialize_message(data: bytes | str) -> dict[str, Any]:
    """Deserialize a JSON-RPC message with orjson.

    Raises:
        orjson.JSONDecodeError: If the frame is not valid JSON.
        ValueError: If the frame is valid JSON but not an object.
    """
    result = orjson.loads(data)
    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
    return result


__all__ = ["serialize_message", "deserialize_message"]
