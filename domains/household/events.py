"""Upcoming events list with add-to-calendar links."""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

from domains.base import ListDomain
from domains.reminders.config import DISPLAY_FORMAT
from .calendar_links import calendar_links


@dataclass
class Event:
    name: str
    start: datetime
    added_by: str
    added_at: datetime


class EventList(ListDomain):
    name = "events"
    title = "📅 Upcoming Events"
    empty_text = "No events planned!"
    usage = "Use `event: name saturday 2pm` to add • Use `remove event: name` to remove"
    color = 0xEB459E

    def __init__(self, tz: tzinfo):
        self.tz = tz
        self._events: list[Event] = []

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def add(self, name: str, start: datetime, added_by: str, now: datetime) -> Event:
        event = Event(name=name, start=start, added_by=added_by, added_at=now)
        self._events.append(event)
        return event

    def remove(self, search: str) -> Optional[Event]:
        """Remove the first event whose name contains search (case-insensitive)."""
        needle = search.strip().lower()
        if not needle:
            return None
        for i, event in enumerate(self._events):
            if needle in event.name.lower():
                return self._events.pop(i)
        return None

    def render_lines(self, now: datetime) -> list[str]:
        lines = []
        for i, event in enumerate(self._events, start=1):
            when = event.start.astimezone(self.tz).strftime(DISPLAY_FORMAT)
            links = " • ".join(
                f"[{service}]({url})" for service, url in calendar_links(event.name, event.start).items()
            )
            lines.append(f"{i}. **{event.name}** - {when} _(added by {event.added_by})_")
            lines.append(f"   {links}")
        return lines
