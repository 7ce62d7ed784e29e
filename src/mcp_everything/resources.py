#!/usr/bin/env python3
# src/mcp_everything/resources.py
"""
Resource Catalog - 100 static, paginable, addressable resources

Resource ``i`` (0-based) lives at ``test://static/resource/{i+1}``. Even
indices are plain text, odd indices are base64 blobs. Listing order and
lookup by URI agree on that single ordering.
"""

import base64
import binascii
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from .constants import (
    KEY_NEXT_CURSOR,
    MIME_TYPE_BINARY,
    MIME_TYPE_TEXT,
    PAGE_SIZE,
    RESOURCE_COUNT,
    RESOURCE_URI_PREFIX,
    RESOURCE_URI_TEMPLATE,
)
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resource:
    """One immutable catalog entry. Exactly one of ``text``/``blob`` is set."""

    uri: str
    name: str
    mime_type: str
    text: str | None = None
    blob: str | None = None

    @property
    def is_text(self) -> bool:
        return self.text is not None

    def to_mcp_format(self) -> dict[str, Any]:
        """Resource contents in MCP format (used by list, read and embedding)."""
        data: dict[str, Any] = {"uri": self.uri, "name": self.name, "mimeType": self.mime_type}
        if self.text is not None:
            data["text"] = self.text
        else:
            data["blob"] = self.blob
        return data


def uri_for_index(index: int) -> str:
    """URI of the resource at 0-based position ``index``."""
    return f"{RESOURCE_URI_PREFIX}{index + 1}"


def make_resource(index: int) -> Resource:
    """Deterministically build the resource at 0-based position ``index``."""
    number = index + 1
    uri = uri_for_index(index)
    name = f"Resource {number}"
    if index % 2 == 0:
        text = f"Resource {number}: This is a plaintext resource"
        return Resource(uri=uri, name=name, mime_type=MIME_TYPE_TEXT, text=text)
    payload = f"Resource {number}: This is a base64 blob".encode()
    return Resource(uri=uri, name=name, mime_type=MIME_TYPE_BINARY, blob=base64.b64encode(payload).decode())


def encode_cursor(offset: int) -> str:
    """Encode an offset as an opaque pagination cursor."""
    return base64.b64encode(str(offset).encode()).decode()


def decode_cursor(cursor: Any, size: int) -> int:
    """Decode a pagination cursor back into an offset.

    Raises:
        ValidationError: If the cursor is not a string, not base64, does not
            hold a decimal integer, or points outside ``[0, size)``.
    """
    if not isinstance(cursor, str):
        raise ValidationError("cursor", f"must be a string, got {type(cursor).__name__}")
    try:
        decoded = base64.b64decode(cursor, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError):
        raise ValidationError("cursor", "malformed cursor") from None
    if not decoded.isdigit():
        raise ValidationError("cursor", "malformed cursor")
    try:
        offset = int(decoded)
    except ValueError:
        # digit strings past the interpreter's int conversion limit
        raise ValidationError("cursor", "malformed cursor") from None
    if offset >= size:
        raise ValidationError("cursor", f"offset {offset} is out of range")
    return offset


class ResourceCatalog:
    """Enumerable, paginable collection of static resources."""

    def __init__(self, size: int = RESOURCE_COUNT, page_size: int = PAGE_SIZE):
        self.page_size = page_size
        self._resources: list[Resource] = [make_resource(i) for i in range(size)]
        logger.debug(f"Resource catalog created with {size} resources")

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources)

    def list_page(self, cursor: str | None = None) -> dict[str, Any]:
        """Return one page of resources starting at the cursor's offset.

        ``nextCursor`` is present iff more items remain after this page.
        """
        start = 0 if cursor is None else decode_cursor(cursor, len(self._resources))
        end = min(start + self.page_size, len(self._resources))

        result: dict[str, Any] = {"resources": [r.to_mcp_format() for r in self._resources[start:end]]}
        if end < len(self._resources):
            result[KEY_NEXT_CURSOR] = encode_cursor(end)
        return result

    def read(self, uri: str) -> Resource:
        """Look up a resource by URI.

        Raises:
            NotFoundError: If the URI does not follow the catalog's scheme or
                its index is out of range.
        """
        if not isinstance(uri, str) or not uri.startswith(RESOURCE_URI_PREFIX):
            raise NotFoundError.resource(str(uri))
        suffix = uri[len(RESOURCE_URI_PREFIX) :]
        if not (suffix.isascii() and suffix.isdigit()):
            raise NotFoundError.resource(uri)
        try:
            index = int(suffix) - 1
        except ValueError:
            raise NotFoundError.resource(uri) from None
        if not 0 <= index < len(self._resources):
            raise NotFoundError.resource(uri)
        return self._resources[index]

    def get(self, resource_id: int) -> Resource:
        """Look up a resource by its 1-based id."""
        if not 1 <= resource_id <= len(self._resources):
            raise NotFoundError.resource(f"{RESOURCE_URI_PREFIX}{resource_id}")
        return self._resources[resource_id - 1]

    def list_templates(self) -> list[dict[str, Any]]:
        return [
            {
                "uriTemplate": RESOURCE_URI_TEMPLATE,
                "name": "Static Resource",
                "description": "A static resource with a numeric ID",
            }
        ]
