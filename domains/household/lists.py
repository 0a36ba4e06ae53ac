"""Simple named-item lists: groceries and maintenance.

Both are an ordered list of names with attribution. Names are unique
case-insensitively; adding an existing name is a no-op.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from domains.base import ListDomain


@dataclass
class NamedItem:
    name: str
    added_by: str
    added_at: datetime


class NamedItemList(ListDomain):
    """Ordered list of uniquely-named items."""

    def __init__(self):
        self._items: list[NamedItem] = []

    @property
    def items(self) -> list[NamedItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _index(self, name: str) -> int:
        needle = name.strip().lower()
        for i, item in enumerate(self._items):
            if item.name.lower() == needle:
                return i
        return -1

    def add(self, names: Iterable[str], added_by: str, now: datetime) -> tuple[list[str], list[str]]:
        """Append new names.

        Returns:
            Tuple of (added, already present)
        """
        added, existing = [], []
        for name in names:
            if self._index(name) >= 0 or name.lower() in (a.lower() for a in added):
                existing.append(name)
                continue
            self._items.append(NamedItem(name=name, added_by=added_by, added_at=now))
            added.append(name)
        return added, existing

    def remove(self, names: Iterable[str]) -> tuple[list[str], list[str]]:
        """Remove names (case-insensitive).

        Returns:
            Tuple of (removed, not found)
        """
        removed, missing = [], []
        for name in names:
            i = self._index(name)
            if i < 0:
                missing.append(name)
                continue
            removed.append(self._items.pop(i).name)
        return removed, missing

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count

    def render_lines(self, now: datetime) -> list[str]:
        return [
            f"{i}. {item.name} _(added by {item.added_by})_"
            for i, item in enumerate(self._items, start=1)
        ]


class GroceryList(NamedItemList):
    name = "groceries"
    title = "🛒 Grocery List"
    empty_text = "No items needed!"
    usage = "Use `buy: item1, item2` to add items • Use `got: item1, item2` to remove items"
    color = 0x57F287


class MaintenanceList(NamedItemList):
    name = "maintenance"
    title = "🔧 Maintenance"
    empty_text = "Nothing needs fixing!"
    usage = "Use `fix: item` to add a job • Use `fixed: item` when it's done"
    color = 0xFEE75C
