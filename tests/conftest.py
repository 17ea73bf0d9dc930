"""Pytest configuration for broadcaster tests."""

import asyncio
import logging
import sys
from pathlib import Path

import pytest
import pytest_asyncio

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from async_broadcaster import AsyncBroadcaster, PushSource  # noqa: E402
from async_broadcaster.config import set_config  # noqa: E402

pytest_plugins = ["pytest_asyncio"]


async def _settle(rounds: int = 20) -> None:
    """Let every ready task on the loop run a few steps."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    return _settle


@pytest_asyncio.fixture
async def source_and_broadcaster():
    source: PushSource[object] = PushSource()
    broadcaster: AsyncBroadcaster[object] = AsyncBroadcaster(source)
    yield source, broadcaster
    await broadcaster.aclose()
    await _settle()


@pytest.fixture(autouse=True)
def reset_global_config():
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)
