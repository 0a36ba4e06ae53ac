"""Periodic reminder checks on APScheduler.

Two interval jobs scan the store:
- due-check (every minute): delivers one-time reminders whose due date has
  passed and marks them sent, only once the prompt was actually posted
- recurrence-check (every hour): fires recurring reminders whose rule says
  an occurrence is due and advances last_fired
"""

from datetime import datetime, tzinfo
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from chat_client import ChatClient
from logger import logger
from .config import (
    LOCAL_TZ,
    DUE_CHECK_JOB_ID,
    DUE_CHECK_SECONDS,
    RECURRING_CHECK_JOB_ID,
    RECURRING_CHECK_SECONDS,
)
from .executor import deliver_reminder, deliver_recurring
from .models import occurrence_id
from .store import ReminderStore


class ReminderScheduler:
    """Evaluates the reminder store on a fixed cadence."""

    def __init__(
        self,
        store: ReminderStore,
        chat: ChatClient,
        tz: tzinfo = LOCAL_TZ,
        on_change: Optional[Callable[[], Awaitable]] = None
    ):
        """Initialize the scheduler.

        Args:
            store: Reminder store to scan
            chat: Chat client used for delivery
            tz: Timezone for calendar-day rules
            on_change: Awaited after a tick that fired something (re-renders anchors)
        """
        self.store = store
        self.chat = chat
        self.tz = tz
        self.on_change = on_change

    async def check_due(self, now: Optional[datetime] = None) -> int:
        """Deliver due one-time reminders.

        Holds the store lock for the whole tick so a button press on the
        same reminder waits until delivery has settled.

        Returns:
            Count of reminders delivered
        """
        now = now or datetime.now(self.tz)
        delivered = 0

        async with self.store.lock:
            for reminder in self.store.due(now):
                try:
                    if await deliver_reminder(self.chat, reminder):
                        self.store.mark_sent(reminder.id)
                        delivered += 1
                except Exception as e:
                    logger.error(f"Due-check failed for reminder {reminder.id}: {e}")

        if delivered:
            logger.info(f"Due-check delivered {delivered} reminder(s)")
            await self._changed()
        return delivered

    async def check_recurring(self, now: Optional[datetime] = None) -> int:
        """Fire recurring reminders whose next occurrence is due.

        last_fired is only advanced after a successful delivery, so a failed
        occurrence is retried on the next tick.

        Returns:
            Count of occurrences fired
        """
        now = now or datetime.now(self.tz)
        fired = 0

        async with self.store.lock:
            for reminder in self.store.all_recurring():
                try:
                    if not reminder.is_due(now, self.tz):
                        continue
                    occurrence = occurrence_id(reminder.id, now)
                    if await deliver_recurring(self.chat, reminder, occurrence):
                        self.store.touch_last_fired(reminder.id, now)
                        fired += 1
                except Exception as e:
                    logger.error(f"Recurrence-check failed for {reminder.id}: {e}")

        if fired:
            logger.info(f"Recurrence-check fired {fired} reminder(s)")
            await self._changed()
        return fired

    async def _changed(self):
        if not self.on_change:
            return
        try:
            await self.on_change()
        except Exception as e:
            logger.error(f"Failed to refresh reminders after tick: {e}")

    def register(self, scheduler: AsyncIOScheduler) -> None:
        """Add both checks as interval jobs."""
        scheduler.add_job(
            self.check_due,
            trigger=IntervalTrigger(seconds=DUE_CHECK_SECONDS),
            id=DUE_CHECK_JOB_ID,
            name="Deliver due reminders",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        scheduler.add_job(
            self.check_recurring,
            trigger=IntervalTrigger(seconds=RECURRING_CHECK_SECONDS),
            id=RECURRING_CHECK_JOB_ID,
            name="Fire recurring reminders",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        logger.info(
            f"Started reminder checks (due every {DUE_CHECK_SECONDS}s, "
            f"recurring every {RECURRING_CHECK_SECONDS}s)"
        )
