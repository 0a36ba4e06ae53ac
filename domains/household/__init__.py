"""Household lists: groceries, events, cleaning and maintenance."""

from .lists import GroceryList, MaintenanceList, NamedItem
from .events import EventList, Event
from .cleaning import CleaningLog, CleaningEntry
from .calendar_links import calendar_links

__all__ = [
    "GroceryList",
    "MaintenanceList",
    "NamedItem",
    "EventList",
    "Event",
    "CleaningLog",
    "CleaningEntry",
    "calendar_links",
]
