#!/usr/bin/env python3
"""Tests for the log emitter: threshold gating and setLevel confirmation."""

import random
from unittest.mock import AsyncMock

import pytest

from mcp_everything.constants import LOG_LEVELS, McpMethod
from mcp_everything.errors import ValidationError
from mcp_everything.log_emitter import LOG_MESSAGES, LogEmitter, rank


class FixedChoice(random.Random):
    """Always picks the same position."""

    def __init__(self, index: int):
        super().__init__()
        self.index = index

    def choice(self, seq):
        return seq[self.index]


class TestRank:
    def test_order(self):
        assert [rank(level) for level in LOG_LEVELS] == list(range(8))
        assert rank("debug") < rank("info") < rank("notice") < rank("warning")
        assert rank("warning") < rank("error") < rank("critical") < rank("alert") < rank("emergency")

    def test_unknown_level(self):
        with pytest.raises(ValidationError):
            rank("verbose")


class TestTick:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", LOG_LEVELS)
    @pytest.mark.parametrize("index", range(len(LOG_MESSAGES)))
    async def test_emitted_iff_at_or_above_threshold(self, threshold, index):
        notify = AsyncMock()
        emitter = LogEmitter(notify, level=threshold, rng=FixedChoice(index))
        message = LOG_MESSAGES[index]

        emitted = await emitter.tick()

        if rank(message["level"]) >= rank(threshold):
            assert emitted == message
            notify.assert_awaited_once_with(McpMethod.NOTIFICATIONS_MESSAGE, message)
        else:
            assert emitted is None
            notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_threshold_emits_everything(self):
        notify = AsyncMock()
        emitter = LogEmitter(notify, rng=random.Random(1234))
        for _ in range(20):
            assert await emitter.tick() is not None
        assert notify.await_count == 20

    def test_eight_fixed_messages_one_per_level(self):
        assert [m["level"] for m in LOG_MESSAGES] == list(LOG_LEVELS)


class TestSetLevel:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("level", LOG_LEVELS)
    async def test_confirmation_is_unconditional(self, level):
        notify = AsyncMock()
        emitter = LogEmitter(notify)

        await emitter.set_level(level)

        assert emitter.level == level
        notify.assert_awaited_once_with(
            McpMethod.NOTIFICATIONS_MESSAGE,
            {"level": "debug", "logger": "test-server", "data": f"Logging level set to: {level}"},
        )

    @pytest.mark.asyncio
    async def test_threshold_applies_to_later_ticks(self):
        notify = AsyncMock()
        emitter = LogEmitter(notify, rng=FixedChoice(1))  # info
        await emitter.set_level("error")
        notify.reset_mock()

        assert await emitter.tick() is None
        notify.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("level", ["verbose", "", None, 3])
    async def test_rejects_unknown_level(self, level):
        notify = AsyncMock()
        emitter = LogEmitter(notify, level="warning")

        with pytest.raises(ValidationError):
            await emitter.set_level(level)

        assert emitter.level == "warning"
        notify.assert_not_awaited()
