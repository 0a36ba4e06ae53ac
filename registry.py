"""List registry for name-based lookups."""

from domains.base import ListDomain


class ListRegistry:
    """All pinned lists, by name."""

    def __init__(self):
        self._by_name: dict[str, ListDomain] = {}  # name → list

    def register(self, domain: ListDomain) -> None:
        """Register a list."""
        self._by_name[domain.name] = domain

    def get(self, name: str) -> ListDomain | None:
        """Get list by name."""
        return self._by_name.get(name)

    def all_lists(self) -> list[ListDomain]:
        """Get all registered lists."""
        return list(self._by_name.values())
