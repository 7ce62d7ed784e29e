#!/usr/bin/env python3
# src/mcp_everything/log_emitter.py
"""
Log Emitter - threshold-gated protocol log notifications

Sends ``notifications/message`` to the client. This is the protocol's own
logging surface and has nothing to do with the process logger.
"""

import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from .constants import (
    LOG_ALERT,
    LOG_CRITICAL,
    LOG_DEBUG,
    LOG_EMERGENCY,
    LOG_ERROR,
    LOG_INFO,
    LOG_LEVELS,
    LOG_NOTICE,
    LOG_WARNING,
    NOTIFICATION_LOGGER,
    McpMethod,
)
from .errors import ValidationError

logger = logging.getLogger(__name__)

NotifyFn = Callable[[str, dict[str, Any] | None], Awaitable[None]]

LOG_MESSAGES: tuple[dict[str, str], ...] = (
    {"level": LOG_DEBUG, "data": "Debug-level message"},
    {"level": LOG_INFO, "data": "Info-level message"},
    {"level": LOG_NOTICE, "data": "Notice-level message"},
    {"level": LOG_WARNING, "data": "Warning-level message"},
    {"level": LOG_ERROR, "data": "Error-level message"},
    {"level": LOG_CRITICAL, "data": "Critical-level message"},
    {"level": LOG_ALERT, "data": "Alert level-message"},
    {"level": LOG_EMERGENCY, "data": "Emergency-level message"},
)


def rank(level: str) -> int:
    """Position of ``level`` in the severity ordering, debug being 0."""
    try:
        return LOG_LEVELS.index(level)
    except ValueError:
        raise ValidationError("level", f"must be one of {', '.join(LOG_LEVELS)}, got {level!r}") from None


class LogEmitter:
    """Holds the client's log threshold and emits synthetic log messages."""

    def __init__(self, notify: NotifyFn, level: str = LOG_DEBUG, rng: random.Random | None = None):
        rank(level)
        self._notify = notify
        self._level = level
        self._rng = rng or random.Random()

    @property
    def level(self) -> str:
        return self._level

    def should_emit(self, level: str) -> bool:
        return rank(level) >= rank(self._level)

    async def set_level(self, level: Any) -> None:
        """Replace the threshold and confirm at debug level.

        The confirmation is sent whatever the new threshold is.
        """
        if not isinstance(level, str):
            raise ValidationError("level", f"must be a string, got {type(level).__name__}")
        rank(level)
        self._level = level
        logger.debug(f"Client log level set to {level}")
        await self._notify(
            McpMethod.NOTIFICATIONS_MESSAGE,
            {"level": LOG_DEBUG, "logger": NOTIFICATION_LOGGER, "data": f"Logging level set to: {level}"},
        )

    async def tick(self) -> dict[str, str] | None:
        """Pick one message at random and emit it if it clears the threshold.

        Returns:
            The emitted message params, or None if it was dropped.
        """
        message = self._rng.choice(LOG_MESSAGES)
        if not self.should_emit(message["level"]):
            return None
        params = dict(message)
        await self._notify(McpMethod.NOTIFICATIONS_MESSAGE, params)
        return params
