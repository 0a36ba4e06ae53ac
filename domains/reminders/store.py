"""In-memory reminder store.

Holds one-time and recurring reminders for the lifetime of the process.
All methods are synchronous and total: a miss returns None/False rather than
raising. ``lock`` is held by async callers (scheduler ticks, button presses)
across check-deliver-mark sequences so a reminder's ``sent`` flag is never
read stale while a delivery is in flight.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional

from logger import logger
from .models import Reminder, RecurringReminder


def _matches(search: str) -> Callable[[str], bool]:
    needle = search.strip().lower()
    return lambda message: bool(needle) and needle in message.lower()


class ReminderStore:
    """Authoritative collection of reminders and their lifecycle state."""

    def __init__(self):
        self._reminders: list[Reminder] = []
        self._recurring: list[RecurringReminder] = []
        self.lock = asyncio.Lock()

    # --- one-time ---

    def add_one_time(self, reminder: Reminder) -> Reminder:
        self._reminders.append(reminder)
        logger.info(f"Added reminder {reminder.id} due {reminder.due_date.isoformat()}")
        return reminder

    def get(self, reminder_id: str) -> Optional[Reminder]:
        for reminder in self._reminders:
            if reminder.id == reminder_id:
                return reminder
        return None

    def remove_one_time(self, search: str) -> Optional[Reminder]:
        """Remove the first reminder (insertion order) whose message contains search.

        Ambiguous search text removes whichever reminder was added first.
        """
        matches = _matches(search)
        for i, reminder in enumerate(self._reminders):
            if matches(reminder.message):
                logger.info(f"Removed reminder {reminder.id}")
                return self._reminders.pop(i)
        return None

    def mark_completed(self, reminder_id: str, completed_by: str, when: datetime) -> Optional[Reminder]:
        """Resolve a reminder. Completing twice keeps the first completion."""
        reminder = self.get(reminder_id)
        if reminder is None:
            return None
        if not reminder.completed:
            reminder.completed = True
            reminder.completed_by = completed_by
            reminder.completed_at = when
            logger.info(f"Reminder {reminder_id} completed by {completed_by}")
        return reminder

    def snooze(self, reminder_id: str, new_due_date: datetime) -> Optional[Reminder]:
        """Push the due date back and re-arm delivery.

        Completed reminders cannot be snoozed.
        """
        reminder = self.get(reminder_id)
        if reminder is None or reminder.completed:
            return None
        reminder.due_date = new_due_date
        reminder.sent = False
        logger.info(f"Reminder {reminder_id} snoozed until {new_due_date.isoformat()}")
        return reminder

    def mark_sent(self, reminder_id: str) -> bool:
        reminder = self.get(reminder_id)
        if reminder is None:
            return False
        reminder.sent = True
        return True

    def due(self, now: datetime) -> list[Reminder]:
        """Reminders ready for delivery."""
        return [r for r in self._reminders if r.is_due(now)]

    def overdue(self, now: datetime) -> list[Reminder]:
        return sorted(
            (r for r in self._reminders if r.is_overdue(now)),
            key=lambda r: r.due_date,
        )

    def upcoming(self, now: datetime) -> list[Reminder]:
        return sorted(
            (r for r in self._reminders if not r.completed and r.due_date > now),
            key=lambda r: r.due_date,
        )

    def all_one_time(self) -> list[Reminder]:
        return list(self._reminders)

    # --- recurring ---

    def add_recurring(self, reminder: RecurringReminder) -> RecurringReminder:
        self._recurring.append(reminder)
        logger.info(f"Added recurring reminder {reminder.id} ({reminder.frequency.describe()})")
        return reminder

    def get_recurring(self, reminder_id: str) -> Optional[RecurringReminder]:
        for reminder in self._recurring:
            if reminder.id == reminder_id:
                return reminder
        return None

    def remove_recurring(self, search: str) -> Optional[RecurringReminder]:
        """Remove the first recurring reminder whose message contains search."""
        matches = _matches(search)
        for i, reminder in enumerate(self._recurring):
            if matches(reminder.message):
                logger.info(f"Removed recurring reminder {reminder.id}")
                return self._recurring.pop(i)
        return None

    def touch_last_fired(self, reminder_id: str, when: datetime) -> bool:
        """Record a firing. last_fired never moves backwards."""
        reminder = self.get_recurring(reminder_id)
        if reminder is None:
            return False
        if reminder.last_fired is None or when > reminder.last_fired:
            reminder.last_fired = when
        return True

    def all_recurring(self) -> list[RecurringReminder]:
        return list(self._recurring)
