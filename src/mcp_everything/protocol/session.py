#!/usr/bin/env python3
# src/mcp_everything/protocol/session.py
"""
Session State - everything mutable about one client connection

The session owns the subscription set, the log threshold, the pending peer
request table and the three background timers. It is handed explicitly to
every handler and tick; nothing here lives at module level.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from ..config import ServerConfig
from ..constants import JSONRPC_KEY, JSONRPC_VERSION, KEY_METHOD, KEY_PARAMS, McpMethod
from ..log_emitter import LogEmitter
from ..peer import PeerRequestGateway
from ..subscriptions import SubscriptionManager

logger = logging.getLogger(__name__)

SendFn = Callable[[dict[str, Any]], Awaitable[None]]


class EverythingSession:
    """Per-connection state shared by the dispatcher and background tasks."""

    def __init__(
        self,
        send: SendFn,
        config: ServerConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or ServerConfig()
        self._send = send
        self.client_info: dict[str, Any] = {}
        self.protocol_version: str | None = None

        self.gateway = PeerRequestGateway(send, timeout=self.config.peer_timeout)
        self.subscriptions = SubscriptionManager(self.notify, self.gateway)
        self.log_emitter = LogEmitter(self.notify, rng=rng)

        self._timers: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def client_capabilities(self) -> dict[str, Any]:
        return self.gateway.client_capabilities

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timers_running(self) -> bool:
        return any(not task.done() for task in self._timers)

    def initialize(self, client_info: dict[str, Any], protocol_version: str, capabilities: dict[str, Any]) -> None:
        """Record what the client told us at initialize."""
        self.client_info = client_info
        self.protocol_version = protocol_version
        self.gateway.client_capabilities = capabilities

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification. Failures are logged, never raised."""
        if self._closed:
            return
        notification: dict[str, Any] = {JSONRPC_KEY: JSONRPC_VERSION, KEY_METHOD: method}
        if params is not None:
            notification[KEY_PARAMS] = params
        try:
            await self._send(notification)
        except Exception as e:
            logger.debug(f"Failed to send {method} notification: {e}")

    async def send_stderr_message(self, now: datetime | None = None) -> None:
        timestamp = (now or datetime.now()).strftime("%H:%M:%S")
        await self.notify(McpMethod.NOTIFICATIONS_STDERR, {"content": f"{timestamp}: A stderr message"})

    # ================================================================
    # Background timers
    # ================================================================

    def start_timers(self) -> None:
        """Start the periodic tasks. Calling again while running does nothing."""
        if self._closed or self._timers:
            return
        self._timers = [
            asyncio.create_task(
                self._run_periodic("subscription-updates", self.config.subscription_interval, self.subscriptions.tick)
            ),
            asyncio.create_task(self._run_periodic("log-messages", self.config.log_interval, self.log_emitter.tick)),
            asyncio.create_task(
                self._run_periodic("stderr-messages", self.config.stderr_interval, self.send_stderr_message)
            ),
        ]
        logger.debug("Session timers started")

    async def _run_periodic(self, name: str, interval: float, tick: Callable[[], Awaitable[Any]]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except Exception as e:
                logger.warning(f"{name} tick failed: {e}")

    async def close(self, reason: str = "Session closed") -> None:
        """Cancel every timer and fail outstanding peer requests."""
        if self._closed:
            return
        self._closed = True

        timers, self._timers = self._timers, []
        for task in timers:
            task.cancel()
        await asyncio.gather(*timers, return_exceptions=True)

        self.gateway.close(reason)
        logger.debug(f"Session closed: {reason}")
