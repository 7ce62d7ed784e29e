#!/usr/bin/env python3
# src/mcp_everything/completions.py
"""
Completion - prefix-filtered argument suggestions
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

REF_RESOURCE = "ref/resource"
REF_PROMPT = "ref/prompt"

EXAMPLE_COMPLETIONS: dict[str, tuple[str, ...]] = {
    "style": ("casual", "formal", "technical", "friendly"),
    "temperature": ("0", "0.5", "0.7", "1.0"),
    "resourceId": ("1", "2", "3", "4", "5"),
}

CompletionProvider = Callable[[dict[str, Any], dict[str, Any]], Awaitable[dict[str, Any]]]


def completion_result(values: list[str]) -> dict[str, Any]:
    return {"values": values, "hasMore": False, "total": len(values)}


def _filter(candidates: tuple[str, ...], partial: Any) -> list[str]:
    prefix = partial if isinstance(partial, str) else ""
    return [value for value in candidates if value.startswith(prefix)]


async def complete_resource(ref: dict[str, Any], argument: dict[str, Any]) -> dict[str, Any]:
    """Suggest resource ids for a ``ref/resource`` reference.

    A URI with nothing after its final ``/`` gets no suggestions.
    """
    uri = ref.get("uri")
    if not isinstance(uri, str) or not uri.rsplit("/", 1)[-1]:
        return completion_result([])
    return completion_result(_filter(EXAMPLE_COMPLETIONS["resourceId"], argument.get("value")))


async def complete_prompt(ref: dict[str, Any], argument: dict[str, Any]) -> dict[str, Any]:
    """Suggest values for a prompt argument; unknown argument names get none."""
    name = argument.get("name")
    candidates = EXAMPLE_COMPLETIONS.get(name) if isinstance(name, str) else None
    if candidates is None:
        return completion_result([])
    return completion_result(_filter(candidates, argument.get("value")))


class CompletionRegistry:
    """Completion providers keyed by reference type."""

    def __init__(self) -> None:
        self._providers: dict[str, CompletionProvider] = {}
        self.register(REF_RESOURCE, complete_resource)
        self.register(REF_PROMPT, complete_prompt)

    def register(self, ref_type: str, provider: CompletionProvider) -> None:
        self._providers[ref_type] = provider
        logger.debug(f"Registered completion provider: {ref_type}")

    async def complete(self, ref: Any, argument: Any) -> dict[str, Any]:
        """Run the provider for ``ref["type"]``.

        Unrecognized reference types yield an empty result, not an error.
        """
        ref = ref if isinstance(ref, dict) else {}
        argument = argument if isinstance(argument, dict) else {}
        ref_type = ref.get("type")
        provider = self._providers.get(ref_type) if isinstance(ref_type, str) else None
        if provider is None:
            logger.debug(f"No completion provider for {ref_type!r}")
            return completion_result([])
        return await provider(ref, argument)
