"""Base list class and supporting types.

Every list the assistant keeps (groceries, events, cleaning, maintenance,
reminders) renders the same way: a title, numbered lines and a usage footer,
upserted as one pinned anchor message per channel.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ButtonSpec:
    """Interactive button; custom_id is ``<action_id>:<value>``."""

    label: str
    custom_id: str
    style: str = "secondary"  # discord.ButtonStyle attribute name


@dataclass
class CommandResult:
    """Outcome of a command or button press.

    The router applies it in order: the store is already mutated, then each
    list in ``refresh`` is re-rendered and upserted, then ``reply`` is sent.
    """

    reply: Optional[str] = None
    refresh: list[str] = field(default_factory=list)
    buttons: list[ButtonSpec] = field(default_factory=list)
    # For button presses: replace the prompt instead of replying
    replace_prompt: bool = False


def split_items(text: str) -> list[str]:
    """Split a comma-separated argument list, trimming and dropping empties."""
    return [part.strip() for part in text.split(",") if part.strip()]


class ListDomain(ABC):
    """Base class for all pinned lists."""

    @property
    @abstractmethod
    def name(self) -> str:
        """List identifier, also the anchor key."""
        pass

    @property
    @abstractmethod
    def title(self) -> str:
        pass

    @property
    @abstractmethod
    def empty_text(self) -> str:
        """Shown instead of lines when the list is empty."""
        pass

    @property
    @abstractmethod
    def usage(self) -> str:
        """Footer hint with the commands that change this list."""
        pass

    color: int = 0x5865F2

    @abstractmethod
    def render_lines(self, now: datetime) -> list[str]:
        """Body lines in display order."""
        pass

    def render(self, now: datetime) -> dict:
        """Format the list as an embed dict.

        Pure: the same collection (in the same order) at the same `now`
        renders the same. `now` must be timezone-aware.
        """
        lines = self.render_lines(now)
        return {
            "title": self.title,
            "description": "\n".join(lines) if lines else f"_{self.empty_text}_",
            "color": self.color,
            "footer": {"text": self.usage},
        }
