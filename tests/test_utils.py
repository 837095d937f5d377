"""
Tests for the utility module of pywechaty.
"""

import asyncio
import logging

import pytest

from pywechaty.utils import (
    TRACE,
    ReconnectionManager,
    call_handler,
    gather_limited,
    generate_random_id,
    get_logger,
    parse_json,
    parse_level,
)


class TestLogger:
    """Tests for logging helpers."""

    def test_parse_level_names(self):
        """Test the verbosity names understood in WECHATY_LOG."""
        assert parse_level("error") == logging.ERROR
        assert parse_level("warn") == logging.WARNING
        assert parse_level("INFO") == logging.INFO
        assert parse_level(" debug ") == logging.DEBUG
        assert parse_level("trace") == TRACE

    def test_parse_level_fallback(self):
        """Test unknown or missing levels fall back to the default."""
        assert parse_level(None) == logging.INFO
        assert parse_level("loud") == logging.INFO
        assert parse_level("loud", default=logging.ERROR) == logging.ERROR
        assert parse_level(logging.DEBUG) == logging.DEBUG

    def test_get_logger_namespace(self):
        """Test component loggers live under the package logger."""
        logger = get_logger("Component")

        assert logger.name == "pywechaty.Component"
        assert logging.getLevelName(TRACE) == "TRACE"


class TestHelpers:
    """Tests for helper functions."""

    def test_parse_json(self):
        """Test JSON objects are parsed and anything else yields an empty dict."""
        assert parse_json('{"a": 1}') == {"a": 1}
        assert parse_json("[1, 2]") == {}
        assert parse_json("not json") == {}

    def test_generate_random_id(self):
        """Test random ids have the requested length."""
        assert len(generate_random_id()) == 16
        assert len(generate_random_id(8)) == 8

    @pytest.mark.asyncio
    async def test_gather_limited_keeps_order_and_drops_failures(self):
        """Test batch loading keeps the input order and skips failed ids."""
        # Setup
        async def load(item_id):
            await asyncio.sleep(0.01 if item_id == "a" else 0)
            if item_id == "bad":
                raise ValueError("cannot load")
            return item_id.upper()

        # Test
        result = await gather_limited(load, ["a", "bad", "c"], 2)

        # Verify
        assert result == ["A", "C"]

    @pytest.mark.asyncio
    async def test_gather_limited_respects_limit(self):
        """Test no more than `limit` calls run at once."""
        # Setup
        running = 0
        peak = 0

        async def load(item_id):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return item_id

        # Test
        result = await gather_limited(load, [str(i) for i in range(10)], 3)

        # Verify
        assert len(result) == 10
        assert peak <= 3

    @pytest.mark.asyncio
    async def test_call_handler_sync_and_async(self):
        """Test handlers may be plain or coroutine functions."""
        # Setup
        async def async_handler(value):
            return value * 2

        def sync_handler(value):
            return value + 1

        # Test & verify
        assert await call_handler(async_handler, 2) == 4
        assert await call_handler(sync_handler, 2) == 3


class TestReconnectionManager:
    """Tests for the reconnection backoff."""

    def test_delays_grow_until_exhausted(self):
        """Test delays grow exponentially and stop after max attempts."""
        # Setup
        manager = ReconnectionManager(initial_delay_ms=1000, max_delay_ms=60000,
                                      max_attempts=3, decay_factor=2.0, random_factor=0.0)

        # Test
        delays = [manager.get_next_delay_seconds() for _ in range(4)]

        # Verify
        assert delays == [1.0, 2.0, 4.0, -1]
        assert manager.can_retry() is False

    def test_reset(self):
        """Test reset allows new attempts."""
        # Setup
        manager = ReconnectionManager(initial_delay_ms=10, max_delay_ms=20, max_attempts=1, random_factor=0.0)
        manager.get_next_delay_seconds()

        # Test
        manager.reset()

        # Verify
        assert manager.can_retry() is True
        assert manager.get_next_delay_seconds() == pytest.approx(0.01)
