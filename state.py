"""Assistant state: every list, the anchors and the reminder scheduler.

Constructed once at startup and handed to the router and the bot; tests
build their own isolated instance with a fake chat client.
"""

from datetime import datetime, tzinfo
from typing import Optional

from chat_client import ChatClient
from domains.confirmations import PendingActions
from domains.household import CleaningLog, EventList, GroceryList, MaintenanceList
from domains.pinned import PinnedAnchors
from domains.reminders import ReminderScheduler, ReminderStore, RemindersDomain
from domains.reminders.config import LOCAL_TZ
from logger import logger
from registry import ListRegistry


class AssistantState:
    """Process-lifetime state of the assistant."""

    def __init__(self, chat: ChatClient, tz: tzinfo = LOCAL_TZ):
        self.chat = chat
        self.tz = tz

        self.groceries = GroceryList()
        self.events = EventList(tz)
        self.cleaning = CleaningLog(tz)
        self.maintenance = MaintenanceList()
        self.reminders = ReminderStore()

        self.lists = ListRegistry()
        for domain in (
            self.groceries,
            self.events,
            self.cleaning,
            self.maintenance,
            RemindersDomain(self.reminders, tz),
        ):
            self.lists.register(domain)

        self.anchors = PinnedAnchors(chat)
        self.pending = PendingActions()
        self.scheduler = ReminderScheduler(
            self.reminders,
            chat,
            tz=tz,
            on_change=self.refresh_reminders
        )

    def now(self) -> datetime:
        return datetime.now(self.tz)

    async def refresh(self, list_name: str, channel_id: int, now: Optional[datetime] = None) -> Optional[int]:
        """Re-render a list and upsert its anchor in one channel."""
        domain = self.lists.get(list_name)
        if domain is None:
            logger.warning(f"Unknown list {list_name}")
            return None
        return await self.anchors.upsert(list_name, channel_id, domain.render(now or self.now()))

    async def refresh_everywhere(self, list_name: str, now: Optional[datetime] = None) -> None:
        """Re-render a list in every channel that already has its anchor."""
        for channel_id in self.anchors.channels(list_name):
            await self.refresh(list_name, channel_id, now)

    async def refresh_reminders(self) -> None:
        await self.refresh_everywhere("reminders")
