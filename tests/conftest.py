"""Pytest configuration and fixtures."""

import itertools
import os
import sys
from datetime import datetime
from unittest.mock import Mock, AsyncMock
from zoneinfo import ZoneInfo

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chat_client import InboundMessage  # noqa: E402
from state import AssistantState  # noqa: E402

LONDON = ZoneInfo("Europe/London")
CHANNEL = 555


@pytest.fixture
def tz():
    return LONDON


@pytest.fixture
def now():
    """Monday 1 January 2024, 10:00 London time."""
    return datetime(2024, 1, 1, 10, 0, tzinfo=LONDON)


@pytest.fixture
def chat():
    """Mock chat client; post_message hands out increasing message IDs."""
    ids = itertools.count(1000)
    client = Mock()
    client.post_message = AsyncMock(side_effect=lambda *args, **kwargs: next(ids))
    client.update_message = AsyncMock()
    client.pin_message = AsyncMock()
    client.delete_message = AsyncMock()
    return client


@pytest.fixture
def state(chat):
    return AssistantState(chat, tz=LONDON)


@pytest.fixture
def make_message():
    """Build an inbound chat message."""
    def _make(text: str, user: str = "Sam", user_id: int = 1, channel_id: int = CHANNEL, is_bot: bool = False):
        return InboundMessage(
            channel_id=channel_id,
            channel_name="household",
            user_id=user_id,
            user_display_name=user,
            text=text,
            is_bot=is_bot,
        )
    return _make
