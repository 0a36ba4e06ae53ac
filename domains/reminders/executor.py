"""Deliver reminder prompts to the chat channel."""

from typing import Optional

from chat_client import ChatClient
from domains.base import ButtonSpec
from logger import logger
from .config import SNOOZE_DELAY_MINUTES
from .models import Reminder, RecurringReminder

COMPLETE_ACTION = "reminder_complete"
SNOOZE_ACTION = "reminder_snooze"
RECURRING_COMPLETE_ACTION = "recurring_complete"


def format_mention(target_user: Optional[str], target_user_id: Optional[int]) -> str:
    if target_user_id:
        return f"<@{target_user_id}>"
    if target_user == "everyone":
        return "@everyone"
    if target_user:
        return f"@{target_user}"
    return ""


def _header(title: str, mention: str) -> str:
    return f"{title} {mention}".rstrip()


def reminder_buttons(reminder_id: str) -> list[ButtonSpec]:
    snooze_label = "Snooze 1 hour" if SNOOZE_DELAY_MINUTES == 60 else f"Snooze {SNOOZE_DELAY_MINUTES} min"
    return [
        ButtonSpec("Mark complete", f"{COMPLETE_ACTION}:{reminder_id}", "success"),
        ButtonSpec(snooze_label, f"{SNOOZE_ACTION}:{reminder_id}", "secondary"),
    ]


def recurring_buttons(occurrence: str) -> list[ButtonSpec]:
    return [ButtonSpec("Mark complete", f"{RECURRING_COMPLETE_ACTION}:{occurrence}", "success")]


async def deliver_reminder(chat: ChatClient, reminder: Reminder) -> bool:
    """Post the interactive prompt for a one-time reminder.

    Returns:
        True if the prompt was posted; the caller marks it sent only then
    """
    mention = format_mention(reminder.target_user, reminder.target_user_id)
    try:
        await chat.post_message(
            reminder.channel_id,
            f"{_header('⏰ **Reminder**', mention)}\n\n> {reminder.message}",
            buttons=reminder_buttons(reminder.id),
        )
    except Exception as e:
        logger.error(f"Failed to deliver reminder {reminder.id}: {e}")
        return False

    logger.info(f"Fired reminder {reminder.id}")
    return True


async def deliver_recurring(chat: ChatClient, reminder: RecurringReminder, occurrence: str) -> bool:
    """Post the prompt for one occurrence of a recurring reminder."""
    mention = format_mention(reminder.target_user, reminder.target_user_id)
    try:
        await chat.post_message(
            reminder.channel_id,
            f"{_header('🔁 **Recurring reminder**', mention)}\n\n> {reminder.message}\n"
            f"_({reminder.frequency.describe()})_",
            buttons=recurring_buttons(occurrence),
        )
    except Exception as e:
        logger.error(f"Failed to deliver recurring reminder {occurrence}: {e}")
        return False

    logger.info(f"Fired recurring reminder {occurrence}")
    return True
