"""Reminder records and recurrence rules."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Optional, Union

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class FrequencyUnit(Enum):
    """Units accepted by custom recurrence rules."""
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"  # Approximated as 30 days

    @property
    def days(self) -> int:
        return {"days": 1, "weeks": 7, "months": 30}[self.value]


@dataclass(frozen=True)
class Daily:
    """Fires once per calendar day in the configured timezone."""

    def is_due(self, now: datetime, last_fired: Optional[datetime], tz: tzinfo) -> bool:
        if last_fired is None:
            return True
        return now.astimezone(tz).date() != last_fired.astimezone(tz).date()

    def describe(self) -> str:
        return "daily"


@dataclass(frozen=True)
class Weekly:
    """Fires when a week has elapsed since the last firing.

    The weekday only gates the first firing.
    """
    weekday: int  # 0 = Monday

    def is_due(self, now: datetime, last_fired: Optional[datetime], tz: tzinfo) -> bool:
        if last_fired is None:
            return now.astimezone(tz).weekday() == self.weekday
        return now - last_fired >= timedelta(days=7)

    def describe(self) -> str:
        return f"weekly on {WEEKDAYS[self.weekday].title()}"


@dataclass(frozen=True)
class Monthly:
    """Fires once per calendar month in the configured timezone."""

    def is_due(self, now: datetime, last_fired: Optional[datetime], tz: tzinfo) -> bool:
        if last_fired is None:
            return True
        local_now = now.astimezone(tz)
        local_last = last_fired.astimezone(tz)
        return (local_now.year, local_now.month) != (local_last.year, local_last.month)

    def describe(self) -> str:
        return "monthly"


@dataclass(frozen=True)
class Custom:
    """Fires every N days, weeks or (30-day) months."""
    interval: int
    unit: FrequencyUnit

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"Recurrence interval must be positive, got {self.interval}")

    @property
    def period(self) -> timedelta:
        return timedelta(days=self.interval * self.unit.days)

    def is_due(self, now: datetime, last_fired: Optional[datetime], tz: tzinfo) -> bool:
        if last_fired is None:
            return True
        return now - last_fired >= self.period

    def describe(self) -> str:
        unit = self.unit.value
        if self.interval == 1:
            unit = unit[:-1]
        return f"every {self.interval} {unit}"


FrequencyRule = Union[Daily, Weekly, Monthly, Custom]


@dataclass
class Reminder:
    """One-time reminder.

    ``sent`` guards against duplicate delivery, ``completed`` against
    delivery and overdue display after the user resolved it.
    """
    id: str
    message: str
    due_date: datetime
    created_by: str
    created_at: datetime
    channel_id: Optional[int] = None
    target_user: Optional[str] = None  # Display name or "everyone"
    target_user_id: Optional[int] = None
    completed: bool = False
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    sent: bool = False

    def is_due(self, now: datetime) -> bool:
        """Ready for delivery by the due-check."""
        return not self.completed and not self.sent and self.due_date <= now

    def is_overdue(self, now: datetime) -> bool:
        return not self.completed and self.due_date <= now


@dataclass
class RecurringReminder:
    """Repeating reminder; lives until deleted."""
    id: str
    message: str
    frequency: FrequencyRule
    created_by: str
    created_at: datetime
    channel_id: Optional[int] = None
    target_user: Optional[str] = None
    target_user_id: Optional[int] = None
    last_fired: Optional[datetime] = None

    def is_due(self, now: datetime, tz: tzinfo) -> bool:
        return self.frequency.is_due(now, self.last_fired, tz)


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while number:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
    return out or "0"


def new_reminder_id(prefix: str, now: datetime) -> str:
    """Creation time plus a random suffix, e.g. ``rem_lr3k9x2a_4f1c9e``."""
    millis = int(now.timestamp() * 1000)
    return f"{prefix}_{_base36(millis)}_{uuid.uuid4().hex[:6]}"


def occurrence_id(rule_id: str, fired_at: datetime) -> str:
    """Identifier for a single firing of a recurring reminder."""
    return f"{rule_id}@{int(fired_at.timestamp())}"


def split_occurrence_id(value: str) -> tuple[str, Optional[datetime]]:
    """Inverse of :func:`occurrence_id`; tolerates plain rule ids."""
    rule_id, _, stamp = value.partition("@")
    if not stamp.isdigit():
        return rule_id, None
    return rule_id, datetime.fromtimestamp(int(stamp), tz=timezone.utc)
