"""Cleaning log: who last cleaned what.

Keyed by task name (case-insensitive); logging a task again replaces the
previous entry.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo

from domains.base import ListDomain


@dataclass
class CleaningEntry:
    task: str
    cleaned_by: str
    cleaned_at: datetime


def _ago(then: datetime, now: datetime) -> str:
    days = (now.date() - then.date()).days
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    return f"{days} days ago"


class CleaningLog(ListDomain):
    name = "cleaning"
    title = "🧹 Cleaning Log"
    empty_text = "Nothing logged yet!"
    usage = "Use `cleaned: task1, task2` to log cleaning"
    color = 0x3BA55C

    def __init__(self, tz: tzinfo):
        self.tz = tz
        self._entries: dict[str, CleaningEntry] = {}

    @property
    def entries(self) -> list[CleaningEntry]:
        return list(self._entries.values())

    def log(self, task: str, cleaned_by: str, now: datetime) -> CleaningEntry:
        entry = CleaningEntry(task=task, cleaned_by=cleaned_by, cleaned_at=now)
        self._entries[task.lower()] = entry
        return entry

    def render_lines(self, now: datetime) -> list[str]:
        local_now = now.astimezone(self.tz)
        lines = []
        for entry in self._entries.values():
            cleaned_at = entry.cleaned_at.astimezone(self.tz)
            lines.append(
                f"• **{entry.task}** - {entry.cleaned_by}, {_ago(cleaned_at, local_now)} "
                f"({cleaned_at.strftime('%a %d %b')})"
            )
        return lines
