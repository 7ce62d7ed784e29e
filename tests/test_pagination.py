#!/usr/bin/env python3
"""Tests for the resource catalog: pagination, cursors and addressing."""

import base64

import pytest

from mcp_everything.constants import MIME_TYPE_BINARY, MIME_TYPE_TEXT, PAGE_SIZE, RESOURCE_COUNT, McpMethod
from mcp_everything.errors import NotFoundError, ValidationError
from mcp_everything.resources import ResourceCatalog, decode_cursor, encode_cursor, uri_for_index
from mcp_everything.testing import LoopbackPeer


@pytest.fixture
def catalog():
    return ResourceCatalog()


def _make_cursor(payload: str) -> str:
    return base64.b64encode(payload.encode()).decode()


class TestCursor:
    @pytest.mark.parametrize("offset", [0, 1, 10, 50, 99])
    def test_round_trip(self, offset):
        assert decode_cursor(encode_cursor(offset), RESOURCE_COUNT) == offset

    def test_cursor_is_base64_of_decimal_offset(self):
        assert encode_cursor(20) == _make_cursor("20")

    def test_rejects_non_base64(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_cursor("not base64!!", RESOURCE_COUNT)
        assert exc_info.value.field == "cursor"

    def test_rejects_non_numeric_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_cursor(_make_cursor("abc"), RESOURCE_COUNT)
        assert exc_info.value.data == {"field": "cursor", "reason": "malformed cursor"}

    def test_rejects_negative_offset(self):
        with pytest.raises(ValidationError):
            decode_cursor(_make_cursor("-10"), RESOURCE_COUNT)

    def test_rejects_offset_past_the_end(self):
        with pytest.raises(ValidationError, match="out of range"):
            decode_cursor(_make_cursor("100"), RESOURCE_COUNT)

    def test_rejects_non_string(self):
        with pytest.raises(ValidationError, match="must be a string"):
            decode_cursor(10, RESOURCE_COUNT)

    def test_rejects_digit_string_past_int_conversion_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_cursor(_make_cursor("1" * 5000), RESOURCE_COUNT)
        assert exc_info.value.data == {"field": "cursor", "reason": "malformed cursor"}


class TestListPage:
    def test_first_page_without_cursor(self, catalog):
        result = catalog.list_page()
        assert len(result["resources"]) == PAGE_SIZE
        assert result["resources"][0]["uri"] == "test://static/resource/1"
        assert result["nextCursor"] == encode_cursor(PAGE_SIZE)

    def test_cursor_chain_covers_catalog_exactly_once(self, catalog):
        seen = []
        page_sizes = []
        cursor = None
        while True:
            result = catalog.list_page(cursor)
            page_sizes.append(len(result["resources"]))
            seen.extend(r["uri"] for r in result["resources"])
            cursor = result.get("nextCursor")
            if cursor is None:
                break

        assert seen == [uri_for_index(i) for i in range(RESOURCE_COUNT)]
        assert len(set(seen)) == RESOURCE_COUNT
        assert page_sizes == [PAGE_SIZE] * (RESOURCE_COUNT // PAGE_SIZE)

    def test_last_page_has_no_next_cursor(self, catalog):
        result = catalog.list_page(encode_cursor(90))
        assert len(result["resources"]) == 10
        assert "nextCursor" not in result

    def test_partial_final_page(self):
        small = ResourceCatalog(size=25)
        result = small.list_page(encode_cursor(20))
        assert [r["name"] for r in result["resources"]] == [f"Resource {i}" for i in range(21, 26)]
        assert "nextCursor" not in result

    def test_malformed_cursor_is_an_error_not_offset_zero(self, catalog):
        with pytest.raises(ValidationError):
            catalog.list_page(_make_cursor("garbage"))


class TestAddressing:
    def test_read_matches_listing_for_every_index(self, catalog):
        listing = list(catalog)
        for index, resource in enumerate(listing):
            assert catalog.read(uri_for_index(index)) is resource

    def test_even_index_is_text(self, catalog):
        resource = catalog.read("test://static/resource/1")
        assert resource.mime_type == MIME_TYPE_TEXT
        assert resource.to_mcp_format() == {
            "uri": "test://static/resource/1",
            "name": "Resource 1",
            "mimeType": MIME_TYPE_TEXT,
            "text": "Resource 1: This is a plaintext resource",
        }

    def test_odd_index_is_blob(self, catalog):
        resource = catalog.read("test://static/resource/2")
        assert resource.mime_type == MIME_TYPE_BINARY
        assert not resource.is_text
        assert base64.b64decode(resource.blob) == b"Resource 2: This is a base64 blob"

    @pytest.mark.parametrize(
        "uri",
        [
            "test://static/resource/0",
            "test://static/resource/101",
            "test://static/resource/abc",
            "test://static/resource/",
            "test://other/1",
            "test://static/resource/" + "9" * 5000,
        ],
    )
    def test_unknown_uri(self, catalog, uri):
        with pytest.raises(NotFoundError) as exc_info:
            catalog.read(uri)
        assert exc_info.value.code == -32002
        assert exc_info.value.data == {"uri": uri}

    def test_get_by_id(self, catalog):
        assert catalog.get(7).uri == "test://static/resource/7"
        with pytest.raises(NotFoundError):
            catalog.get(0)

    def test_templates(self, catalog):
        assert catalog.list_templates() == [
            {
                "uriTemplate": "test://static/resource/{id}",
                "name": "Static Resource",
                "description": "A static resource with a numeric ID",
            }
        ]


class TestOversizedNumbersOverProtocol:
    @pytest.mark.asyncio
    async def test_huge_cursor_is_invalid_params(self):
        peer = LoopbackPeer()
        response = await peer.request(McpMethod.RESOURCES_LIST, {"cursor": _make_cursor("1" * 5000)})
        assert response["error"]["code"] == -32602
        assert response["error"]["data"]["field"] == "cursor"
        await peer.close()

    @pytest.mark.asyncio
    async def test_huge_resource_number_is_not_found(self):
        peer = LoopbackPeer()
        uri = "test://static/resource/" + "9" * 5000
        response = await peer.request(McpMethod.RESOURCES_READ, {"uri": uri})
        assert response["error"]["code"] == -32002
        await peer.close()
