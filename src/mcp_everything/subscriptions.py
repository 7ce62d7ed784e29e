#!/usr/bin/env python3
# src/mcp_everything/subscriptions.py
"""
Subscription Manager - resource subscriptions and update notifications
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .constants import CAPABILITY_SAMPLING, McpMethod
from .peer import PeerRequestGateway

logger = logging.getLogger(__name__)

NotifyFn = Callable[[str, dict[str, Any] | None], Awaitable[None]]

SUBSCRIPTION_STARTED_CONTEXT = "A new subscription was started"


class SubscriptionManager:
    """The set of resource URIs the client is subscribed to.

    Writers hold ``_lock``; readers work on a snapshot copy, so a tick that
    overlaps a subscribe or unsubscribe sees either the old or the new set.
    """

    def __init__(self, notify: NotifyFn, gateway: PeerRequestGateway):
        self._notify = notify
        self._gateway = gateway
        self._uris: set[str] = set()
        self._lock = asyncio.Lock()

    def __contains__(self, uri: object) -> bool:
        return uri in self._uris

    def __len__(self) -> int:
        return len(self._uris)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._uris)

    async def subscribe(self, uri: str) -> None:
        """Record a subscription, then tell the client about it via sampling.

        The subscription is recorded before the round trip, so it survives a
        failed or timed out sampling request.

        Raises:
            PeerError: If the sampling round trip fails.
        """
        async with self._lock:
            self._uris.add(uri)
        logger.debug(f"Subscribed to {uri} ({len(self._uris)} active)")

        # Decision 2 in DESIGN.md: a client without sampling gets no round trip.
        if not self._gateway.client_supports(CAPABILITY_SAMPLING):
            logger.debug(f"Client lacks sampling; not announcing subscription to {uri}")
            return
        await self._gateway.request_sampling(SUBSCRIPTION_STARTED_CONTEXT, uri)

    async def unsubscribe(self, uri: str) -> None:
        async with self._lock:
            self._uris.discard(uri)
        logger.debug(f"Unsubscribed from {uri} ({len(self._uris)} active)")

    async def tick(self) -> int:
        """Send one resources/updated notification per subscribed URI.

        Returns:
            The number of notifications sent.
        """
        uris = self.snapshot()
        for uri in uris:
            await self._notify(McpMethod.NOTIFICATIONS_RESOURCES_UPDATED, {"uri": uri})
        return len(uris)
