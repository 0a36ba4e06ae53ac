"""Reminder commands and button presses.

Each function mutates the store and returns a CommandResult; the router
takes care of re-rendering the anchor and sending the reply.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from domains.base import CommandResult
from logger import logger
from .config import LOCAL_TZ, DISPLAY_FORMAT, REPHRASE_HINT, FREQUENCY_HINT, SNOOZE_DELAY_MINUTES
from .models import Daily, Monthly, Reminder, RecurringReminder, Weekly, new_reminder_id, split_occurrence_id
from .parser import extract_due_date, find_weekday, parse_frequency, strip_frequency, strip_weekday
from .store import ReminderStore

NOT_FOUND = "Reminder not found. Use `reminders` to see your reminders."


def _who(target_user: Optional[str]) -> str:
    if not target_user:
        return ""
    if target_user == "everyone":
        return " for everyone"
    return f" for {target_user}"


def create_reminder(
    store: ReminderStore,
    body: str,
    created_by: str,
    channel_id: int,
    now: datetime,
    target_user: Optional[str] = None,
    target_user_id: Optional[int] = None,
    tz: tzinfo = LOCAL_TZ
) -> CommandResult:
    """Handle `remind me: ...` / `remind <name>: ...`.

    Unparseable text leaves the store untouched and replies with a hint.
    """
    parsed = extract_due_date(body, reference=now, tz=tz)
    if not parsed:
        return CommandResult(reply=REPHRASE_HINT)

    message, due = parsed
    reminder = store.add_one_time(Reminder(
        id=new_reminder_id("rem", now),
        message=message,
        due_date=due,
        created_by=created_by,
        created_at=now,
        channel_id=channel_id,
        target_user=target_user,
        target_user_id=target_user_id,
    ))

    when = reminder.due_date.astimezone(tz).strftime(DISPLAY_FORMAT)
    return CommandResult(
        reply=f"**Reminder set for {when}**{_who(target_user if target_user != created_by else None)}\n\n> {message}",
        refresh=["reminders"],
    )


def create_recurring(
    store: ReminderStore,
    kind: str,
    body: str,
    created_by: str,
    channel_id: int,
    now: datetime,
    target_user: Optional[str] = None,
    target_user_id: Optional[int] = None,
    tz: tzinfo = LOCAL_TZ
) -> CommandResult:
    """Handle `recurring:`, `daily:`, `weekly:` and `monthly:`.

    `recurring:` needs a frequency phrase in the body; the others name the
    frequency in the prefix (`weekly:` honours a weekday in the body).
    """
    kind = kind.lower()
    if kind == "daily":
        frequency, message = Daily(), strip_frequency(body)
    elif kind == "monthly":
        frequency, message = Monthly(), strip_frequency(body)
    elif kind == "weekly":
        weekday = find_weekday(body)
        if weekday is None:
            weekday = now.astimezone(tz).weekday()
        frequency, message = Weekly(weekday), strip_weekday(strip_frequency(body))
    else:
        frequency = parse_frequency(body, reference=now, tz=tz)
        if frequency is None:
            return CommandResult(reply=FREQUENCY_HINT)
        message = strip_frequency(body)

    if not message:
        return CommandResult(reply=FREQUENCY_HINT)

    reminder = store.add_recurring(RecurringReminder(
        id=new_reminder_id("rec", now),
        message=message,
        frequency=frequency,
        created_by=created_by,
        created_at=now,
        channel_id=channel_id,
        target_user=target_user,
        target_user_id=target_user_id,
    ))

    return CommandResult(
        reply=f"**Recurring reminder set ({reminder.frequency.describe()})**\n\n> {message}",
        refresh=["reminders"],
    )


def remove_reminder(store: ReminderStore, search: str) -> CommandResult:
    """Remove the first reminder whose text contains search.

    One-time reminders are searched before recurring ones. When several
    match, the oldest goes.
    """
    removed = store.remove_one_time(search)
    if removed is None:
        removed = store.remove_recurring(search)
    if removed is None:
        return CommandResult(reply=NOT_FOUND)

    return CommandResult(reply=f"Removed reminder: {removed.message}", refresh=["reminders"])


def complete_reminder(store: ReminderStore, reminder_id: str, completed_by: str, now: datetime) -> CommandResult:
    """`Mark complete` button on a one-time reminder prompt."""
    reminder = store.get(reminder_id)
    if reminder is None:
        return CommandResult(reply=NOT_FOUND)
    if reminder.completed:
        return CommandResult(
            reply=f"✅ Already completed by {reminder.completed_by}\n\n> {reminder.message}",
            replace_prompt=True,
        )

    store.mark_completed(reminder_id, completed_by, now)
    return CommandResult(
        reply=f"✅ **Done** - completed by {completed_by}\n\n> {reminder.message}",
        refresh=["reminders"],
        replace_prompt=True,
    )


def snooze_reminder(store: ReminderStore, reminder_id: str, now: datetime, tz: tzinfo = LOCAL_TZ) -> CommandResult:
    """`Snooze` button: due again in an hour, delivery re-armed."""
    reminder = store.get(reminder_id)
    if reminder is None:
        return CommandResult(reply=NOT_FOUND)

    snoozed = store.snooze(reminder_id, now + timedelta(minutes=SNOOZE_DELAY_MINUTES))
    if snoozed is None:
        return CommandResult(reply="That reminder is already completed.")

    until = snoozed.due_date.astimezone(tz).strftime("%H:%M")
    return CommandResult(
        reply=f"😴 **Snoozed until {until}**\n\n> {snoozed.message}",
        refresh=["reminders"],
        replace_prompt=True,
    )


def complete_occurrence(store: ReminderStore, value: str, completed_by: str, tz: tzinfo = LOCAL_TZ) -> CommandResult:
    """`Mark complete` on a recurring prompt acknowledges that occurrence only."""
    rule_id, fired_at = split_occurrence_id(value)
    reminder = store.get_recurring(rule_id)
    if reminder is None:
        return CommandResult(reply=NOT_FOUND)

    logger.info(f"Occurrence {value} completed by {completed_by}")
    when = f" ({fired_at.astimezone(tz).strftime(DISPLAY_FORMAT)})" if fired_at else ""
    return CommandResult(
        reply=f"✅ **Done for this time**{when} - completed by {completed_by}\n\n> {reminder.message}",
        replace_prompt=True,
    )
