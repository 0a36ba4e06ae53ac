"""Tests for pinned anchor upserts."""

import asyncio

import pytest

from chat_client import MessageNotFound
from domains.pinned import PinnedAnchors

CHANNEL = 555
CONTENT = {"title": "🛒 Grocery List", "description": "1. milk"}


class TestUpsert:

    @pytest.mark.asyncio
    async def test_first_upsert_posts_and_pins(self, chat):
        anchors = PinnedAnchors(chat)

        message_id = await anchors.upsert("groceries", CHANNEL, CONTENT)

        assert message_id == 1000
        assert anchors.get("groceries", CHANNEL) == 1000
        chat.post_message.assert_awaited_once_with(CHANNEL, CONTENT)
        chat.pin_message.assert_awaited_once_with(CHANNEL, 1000)

    @pytest.mark.asyncio
    async def test_second_upsert_edits_in_place(self, chat):
        anchors = PinnedAnchors(chat)
        await anchors.upsert("groceries", CHANNEL, CONTENT)

        message_id = await anchors.upsert("groceries", CHANNEL, {"title": "updated"})

        assert message_id == 1000
        chat.post_message.assert_awaited_once()
        chat.update_message.assert_awaited_once_with(CHANNEL, 1000, {"title": "updated"})

    @pytest.mark.asyncio
    async def test_anchors_are_per_list_and_channel(self, chat):
        anchors = PinnedAnchors(chat)

        await anchors.upsert("groceries", CHANNEL, CONTENT)
        await anchors.upsert("events", CHANNEL, CONTENT)
        await anchors.upsert("groceries", 777, CONTENT)

        assert chat.post_message.await_count == 3
        assert sorted(anchors.channels("groceries")) == [CHANNEL, 777]
        assert anchors.channels("events") == [CHANNEL]

    @pytest.mark.asyncio
    async def test_deleted_anchor_is_reposted(self, chat):
        anchors = PinnedAnchors(chat)
        await anchors.upsert("groceries", CHANNEL, CONTENT)
        chat.update_message.side_effect = MessageNotFound("gone")

        message_id = await anchors.upsert("groceries", CHANNEL, CONTENT)

        assert message_id == 1001
        assert anchors.get("groceries", CHANNEL) == 1001

    @pytest.mark.asyncio
    async def test_update_failure_keeps_anchor(self, chat):
        anchors = PinnedAnchors(chat)
        await anchors.upsert("groceries", CHANNEL, CONTENT)
        chat.update_message.side_effect = RuntimeError("rate limited")

        assert await anchors.upsert("groceries", CHANNEL, CONTENT) is None
        assert anchors.get("groceries", CHANNEL) == 1000

    @pytest.mark.asyncio
    async def test_post_failure_is_swallowed(self, chat):
        anchors = PinnedAnchors(chat)
        chat.post_message.side_effect = RuntimeError("missing permissions")

        assert await anchors.upsert("groceries", CHANNEL, CONTENT) is None
        assert anchors.get("groceries", CHANNEL) is None

    @pytest.mark.asyncio
    async def test_pin_failure_still_records_anchor(self, chat):
        anchors = PinnedAnchors(chat)
        chat.pin_message.side_effect = RuntimeError("too many pins")

        assert await anchors.upsert("groceries", CHANNEL, CONTENT) == 1000
        assert anchors.get("groceries", CHANNEL) == 1000

    @pytest.mark.asyncio
    async def test_concurrent_upserts_post_once(self, chat):
        anchors = PinnedAnchors(chat)

        first, second = await asyncio.gather(
            anchors.upsert("groceries", CHANNEL, CONTENT),
            anchors.upsert("groceries", CHANNEL, CONTENT),
        )

        assert first == second == 1000
        chat.post_message.assert_awaited_once()
        chat.update_message.assert_awaited_once()
