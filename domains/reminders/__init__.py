"""Reminders module: one-time and recurring reminders.

In-memory store scanned by APScheduler interval jobs; prompts carry
complete/snooze buttons.
"""

from .models import (
    Reminder,
    RecurringReminder,
    Daily,
    Weekly,
    Monthly,
    Custom,
    FrequencyUnit,
    FrequencyRule,
    occurrence_id,
)
from .parser import parse_due_date, extract_due_date, parse_frequency, strip_frequency
from .store import ReminderStore
from .domain import RemindersDomain
from .scheduler import ReminderScheduler
from .executor import deliver_reminder, deliver_recurring

__all__ = [
    "Reminder",
    "RecurringReminder",
    "Daily",
    "Weekly",
    "Monthly",
    "Custom",
    "FrequencyUnit",
    "FrequencyRule",
    "occurrence_id",
    "parse_due_date",
    "extract_due_date",
    "parse_frequency",
    "strip_frequency",
    "ReminderStore",
    "RemindersDomain",
    "ReminderScheduler",
    "deliver_reminder",
    "deliver_recurring",
]
