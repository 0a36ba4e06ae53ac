"""Pinned anchor messages: one live message per (list, channel).

Upserting edits the anchor in place when it exists, otherwise posts a new
message, records it and pins it. Delivery is best-effort: failures are logged
and never undo the list change that triggered the render.
"""

import asyncio
from collections import defaultdict
from typing import Optional

from chat_client import ChatClient, Content, MessageNotFound
from logger import logger


class PinnedAnchors:
    """Tracks and upserts anchor messages."""

    def __init__(self, chat: ChatClient):
        self.chat = chat
        self._anchors: dict[tuple[str, int], int] = {}  # (list, channel) → message_id
        self._locks: defaultdict[tuple[str, int], asyncio.Lock] = defaultdict(asyncio.Lock)

    def get(self, list_type: str, channel_id: int) -> Optional[int]:
        return self._anchors.get((list_type, channel_id))

    def channels(self, list_type: str) -> list[int]:
        """Channels holding an anchor for list_type."""
        return [channel_id for (name, channel_id) in self._anchors if name == list_type]

    async def upsert(self, list_type: str, channel_id: int, content: Content) -> Optional[int]:
        """Create or update the anchor for (list_type, channel_id).

        Returns:
            Anchor message ID, or None if delivery failed
        """
        key = (list_type, channel_id)
        # Two concurrent upserts must not both post a new anchor
        async with self._locks[key]:
            message_id = self._anchors.get(key)

            if message_id is not None:
                try:
                    await self.chat.update_message(channel_id, message_id, content)
                    logger.debug(f"Updated {list_type} anchor {message_id}")
                    return message_id
                except MessageNotFound:
                    logger.warning(f"{list_type} anchor {message_id} was deleted, posting a new one")
                    del self._anchors[key]
                except Exception as e:
                    logger.error(f"Failed to update {list_type} anchor in {channel_id}: {e}")
                    return None

            try:
                message_id = await self.chat.post_message(channel_id, content)
            except Exception as e:
                logger.error(f"Failed to post {list_type} anchor in {channel_id}: {e}")
                return None

            self._anchors[key] = message_id
            logger.info(f"Posted {list_type} anchor {message_id} in {channel_id}")

            try:
                await self.chat.pin_message(channel_id, message_id)
            except Exception as e:
                logger.warning(f"Failed to pin {list_type} anchor {message_id}: {e}")

            return message_id
