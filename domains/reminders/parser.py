"""Parse natural language due dates and recurrence phrases.

Explicit clock/day phrases ("tomorrow at 7pm", "monday 8:30am", "15th march
9am") go through our own grammar so they resolve the same way every time.
Anything else ("in 2 hours", "next weekend") is handed to dateparser, seeded
with a reference time in the configured timezone.
"""

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

import dateparser
from dateparser.search import search_dates

from logger import logger
from .config import LOCAL_TZ, DEFAULT_HOUR, TONIGHT_HOUR
from .models import (
    WEEKDAYS,
    Custom,
    Daily,
    FrequencyRule,
    FrequencyUnit,
    Monthly,
    Weekly,
)

_WEEKDAY_NAMES = "|".join(WEEKDAYS)
# Full or abbreviated month names only; "novels" and "mars" are not months
_MONTH_NAMES = (
    "jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    "|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)
_MONTHS = {
    name: i + 1
    for i, name in enumerate(["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"])
}

# Time patterns, most specific first. The optional "at"/"by" prefix is part of
# the match so it gets stripped from the task text along with the time.
_TIME_PATTERNS = [
    # 7pm, 7:30pm, 7.30 p.m.
    re.compile(
        r'(?:\b(?:at|by)\s+|@\s*)?\b(?P<hour>\d{1,2})(?:[:.](?P<minute>\d{2}))?\s*'
        r'(?P<meridiem>am|pm|a\.m\.|p\.m\.)(?![a-z])',
        re.IGNORECASE,
    ),
    # 18:00
    re.compile(
        r'(?:\b(?:at|by)\s+|@\s*)?\b(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)\b',
        re.IGNORECASE,
    ),
    # noon / midnight
    re.compile(r'(?:\b(?:at|by)\s+)?\b(?P<named>noon|midday|midnight)\b', re.IGNORECASE),
    # at 7
    re.compile(
        r'\b(?:at|by)\s+(?P<hour>\d{1,2})(?:\.(?P<minute>\d{2}))?\b'
        r'(?!\s*(?:days?|weeks?|months?|hours?|minutes?|mins?)\b)',
        re.IGNORECASE,
    ),
]

_DATE_PATTERN = re.compile(
    r'(?:\b(?:on|this)\s+)?\b(?P<relative>today|tonight|tomorrow|tmrw)\b'
    rf'|(?:\b(?:on|this)\s+|\b(?P<next>next)\s+)?\b(?P<weekday>{_WEEKDAY_NAMES})\b'
    rf'|(?:\bon\s+)?\b(?P<day>\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?(?P<month>{_MONTH_NAMES})\b'
    rf'|(?:\bon\s+)?\b(?P<month_first>{_MONTH_NAMES})\s+(?P<day_second>\d{{1,2}})(?:st|nd|rd|th)?\b'
    # "on the 5th": next occurrence of that day of the month
    rf'|(?:\bon\s+)?\bthe\s+(?P<ordinal>\d{{1,2}})(?:st|nd|rd|th)\b(?!\s+(?:of\s+)?(?:{_MONTH_NAMES})\b)',
    re.IGNORECASE,
)

# Only hand text to dateparser when it carries some temporal hint; otherwise
# free text like "call mom" can be read as a date in another language.
_FALLBACK_HINT = re.compile(
    r'\d|\b(?:in|next|morning|afternoon|evening|weekend|minutes?|mins?|hours?|days?|weeks?|months?)\b',
    re.IGNORECASE,
)


def _reference(reference: Optional[datetime], tz: tzinfo) -> datetime:
    if reference is None:
        return datetime.now(tz)
    if reference.tzinfo is None:
        return reference.replace(tzinfo=tz)
    return reference.astimezone(tz)


def _parse_time(match: re.Match) -> Optional[tuple[int, int]]:
    """Convert a time match to (hour, minute), or None if out of range."""
    groups = match.groupdict()
    named = groups.get("named")
    if named:
        return (0, 0) if named.lower() == "midnight" else (12, 0)

    hour = int(groups["hour"])
    minute = int(groups["minute"] or 0)
    meridiem = (groups.get("meridiem") or "").lower().replace(".", "")

    if meridiem:
        if hour < 1 or hour > 12:
            return None
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        return None
    return hour, minute


def _next_day_of_month(day: int, today: date) -> Optional[date]:
    """First date on or after today falling on that day of the month.

    Short months are skipped, so "the 31st" in February means 31 March.
    """
    year, month = today.year, today.month
    for _ in range(3):
        try:
            target = date(year, month, day)
        except ValueError:
            target = None
        if target and target >= today:
            return target
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return None


def _parse_date(match: re.Match, now: datetime) -> Optional[tuple[date, bool]]:
    """Resolve a date match to (date, is_weekday)."""
    groups = match.groupdict()
    today = now.date()

    relative = (groups.get("relative") or "").lower()
    if relative in ("today", "tonight"):
        return today, False
    if relative in ("tomorrow", "tmrw"):
        return today + timedelta(days=1), False

    weekday = groups.get("weekday")
    if weekday:
        days_ahead = (WEEKDAYS.index(weekday.lower()) - now.weekday()) % 7
        if days_ahead == 0 and groups.get("next"):
            days_ahead = 7
        return today + timedelta(days=days_ahead), True

    ordinal = groups.get("ordinal")
    if ordinal:
        target = _next_day_of_month(int(ordinal), today)
        return (target, False) if target else None

    day = groups.get("day") or groups.get("day_second")
    month_name = groups.get("month") or groups.get("month_first")
    month = _MONTHS[month_name.lower()[:3]]
    try:
        target = date(now.year, month, int(day))
        if target < today:
            target = date(now.year + 1, month, int(day))
    except ValueError:
        return None
    return target, False


def _match_explicit(text: str, now: datetime, tz: tzinfo) -> Optional[tuple[datetime, list[tuple[int, int]]]]:
    """Resolve our own date/time grammar; returns the due date and matched spans."""
    time_match = None
    for pattern in _TIME_PATTERNS:
        time_match = pattern.search(text)
        if time_match:
            break
    date_match = _DATE_PATTERN.search(text)

    if not time_match and not date_match:
        return None

    is_weekday = False
    if date_match:
        resolved = _parse_date(date_match, now)
        if resolved is None:
            return None
        target_date, is_weekday = resolved
    else:
        target_date = now.date()

    if time_match:
        parsed_time = _parse_time(time_match)
        if parsed_time is None:
            return None
        hour, minute = parsed_time
    elif date_match.group("relative") and date_match.group("relative").lower() == "tonight":
        hour, minute = TONIGHT_HOUR, 0
    else:
        hour, minute = DEFAULT_HOUR, 0

    due = datetime.combine(target_date, time(hour, minute), tzinfo=tz)

    # A bare time that has already passed means tomorrow; a weekday whose
    # time has passed today means next week.
    if due <= now:
        if not date_match:
            due = datetime.combine(target_date + timedelta(days=1), time(hour, minute), tzinfo=tz)
        elif is_weekday and target_date == now.date():
            due = datetime.combine(target_date + timedelta(days=7), time(hour, minute), tzinfo=tz)

    spans = [m.span() for m in (time_match, date_match) if m]
    return due, spans


def _dateparser_settings(now: datetime, tz: tzinfo) -> dict:
    return {
        "RELATIVE_BASE": now.replace(tzinfo=None),
        "TIMEZONE": str(tz),
        "TO_TIMEZONE": str(tz),
        "RETURN_AS_TIMEZONE_AWARE": True,
        "PREFER_DATES_FROM": "future",
    }


def _match_fallback(text: str, now: datetime, tz: tzinfo) -> Optional[tuple[str, datetime]]:
    """Ask dateparser to find a date phrase inside free text."""
    if not _FALLBACK_HINT.search(text):
        return None

    try:
        found = search_dates(text, languages=["en"], settings=_dateparser_settings(now, tz))
    except Exception as e:
        logger.warning(f"dateparser search failed for {text!r}: {e}")
        return None

    if not found:
        return None
    phrase, when = found[0]
    return phrase, when.astimezone(tz)


def parse_due_date(
    text: str,
    reference: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """Parse a due date from natural language.

    Examples:
    - "tomorrow at 7pm"
    - "monday 8:30am"
    - "15th march 9am"
    - "in 2 hours"

    Args:
        text: Free text containing a date/time phrase
        reference: "Now" for relative phrases (defaults to now in the configured timezone)
        tz: Timezone to resolve in (defaults to the configured timezone)

    Returns:
        Timezone-aware datetime, or None if nothing could be parsed
    """
    tz = tz or LOCAL_TZ
    now = _reference(reference, tz)

    explicit = _match_explicit(text, now, tz)
    if explicit:
        return explicit[0]

    if not _FALLBACK_HINT.search(text):
        return None

    try:
        parsed = dateparser.parse(text, languages=["en"], settings=_dateparser_settings(now, tz))
    except Exception as e:
        logger.warning(f"dateparser failed for {text!r}: {e}")
        parsed = None
    if parsed:
        return parsed.astimezone(tz)

    fallback = _match_fallback(text, now, tz)
    return fallback[1] if fallback else None


def _clean_task(text: str) -> str:
    text = re.sub(r'\s+', ' ', text).strip()
    text = text.strip('.,;:!-–— ')
    # Dangling connectors left behind once the time phrase is gone
    text = re.sub(r'\s+\b(?:at|on|by|for)$', '', text, flags=re.IGNORECASE)
    text = re.sub(r'^(?:to|that)\s+', '', text, flags=re.IGNORECASE)
    return text.strip()


def extract_due_date(
    text: str,
    reference: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[tuple[str, datetime]]:
    """Split a reminder body into (task, due date).

    "take the bins out tomorrow at 7pm" -> ("take the bins out", <tomorrow 19:00>)

    Returns:
        Tuple of task text and due date, or None if no date was found or
        nothing is left to remind about
    """
    tz = tz or LOCAL_TZ
    now = _reference(reference, tz)

    explicit = _match_explicit(text, now, tz)
    if explicit:
        due, spans = explicit
        task = text
        for start, end in sorted(spans, reverse=True):
            task = task[:start] + " " + task[end:]
    else:
        fallback = _match_fallback(text, now, tz)
        if not fallback:
            return None
        phrase, due = fallback
        task = text.replace(phrase, " ", 1)

    task = _clean_task(task)
    if not task:
        return None
    return task, due


# Ordered: plain keywords before captured intervals. First match wins, so
# "daily, every 3 days" is daily.
_FREQUENCY_PATTERNS = [
    (re.compile(r'\b(?:daily|every\s*day|each\s+day)\b', re.IGNORECASE),
     lambda m: Daily()),
    (re.compile(rf'\b(?:weekly\s+on|every|each)\s+(?P<weekday>{_WEEKDAY_NAMES})s?\b', re.IGNORECASE),
     lambda m: Weekly(WEEKDAYS.index(m.group("weekday").lower()))),
    (re.compile(r'\b(?:weekly|every\s+week|each\s+week)\b', re.IGNORECASE),
     lambda m: Weekly(-1)),
    (re.compile(r'\b(?:monthly|every\s+month|each\s+month)\b', re.IGNORECASE),
     lambda m: Monthly()),
    (re.compile(r'\bevery\s+other\s+(?P<unit>day|week|month)\b', re.IGNORECASE),
     lambda m: Custom(2, FrequencyUnit(m.group("unit").lower() + "s"))),
    (re.compile(r'\bevery\s+(?P<interval>\d+)\s+(?P<unit>day|week|month)s?\b', re.IGNORECASE),
     lambda m: Custom(int(m.group("interval")), FrequencyUnit(m.group("unit").lower() + "s"))),
]


def _match_frequency(
    text: str,
    reference: Optional[datetime],
    tz: tzinfo
) -> Optional[tuple[FrequencyRule, tuple[int, int]]]:
    for pattern, build in _FREQUENCY_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            rule = build(match)
        except ValueError:
            # "every 0 days"
            continue
        if isinstance(rule, Weekly) and rule.weekday < 0:
            rule = Weekly(_reference(reference, tz).weekday())
        return rule, match.span()
    return None


def parse_frequency(
    text: str,
    reference: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[FrequencyRule]:
    """Parse a recurrence phrase.

    Plain "weekly" anchors to the reference day of the week.

    Returns:
        FrequencyRule, or None if no known phrase is present
    """
    matched = _match_frequency(text, reference, tz or LOCAL_TZ)
    return matched[0] if matched else None


def strip_frequency(text: str) -> str:
    """Remove the first recurrence phrase, leaving the reminder message."""
    matched = _match_frequency(text, None, LOCAL_TZ)
    if not matched:
        return text.strip()
    start, end = matched[1]
    return _clean_task(text[:start] + " " + text[end:])


def find_weekday(text: str) -> Optional[int]:
    """Index of the first weekday named in text (0 = Monday)."""
    match = re.search(rf'\b({_WEEKDAY_NAMES})\b', text, re.IGNORECASE)
    return WEEKDAYS.index(match.group(1).lower()) if match else None


def strip_weekday(text: str) -> str:
    """Remove the first "on <weekday>" / "every <weekday>" phrase."""
    stripped = re.sub(
        rf'(?:\b(?:on|every|each)\s+)?\b(?:{_WEEKDAY_NAMES})s?\b', ' ', text, count=1, flags=re.IGNORECASE
    )
    return _clean_task(stripped)
