"""Pytest configuration and shared fixtures.

Async code is driven with `asyncio.run` inside plain test functions, so no
asyncio plugin is needed.
"""

from __future__ import annotations

from collections.abc import Iterator

from loguru import logger
import pytest

from infrastructure.settings import StoreSettings


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru messages of level WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda msg: messages.append(str(msg).rstrip("\n")), level="WARNING", format="{message}"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fast_settings() -> StoreSettings:
    """Store settings with a short store delay."""
    return StoreSettings(store_delay=0.02)
