"""Command router.

Matches message text (case-insensitive) against an ordered rule list; first
match wins and anything unmatched is ignored. Each command runs in the same
order: mutate state, upsert the affected anchors, send the reply.
"""

import re
from datetime import datetime
from typing import Callable, Optional

from chat_client import InboundMessage, InteractionEvent, parse_mention
from domains.base import CommandResult, split_items
from domains.confirmations import CANCEL_ACTION, CONFIRM_ACTION
from domains.reminders.config import DISPLAY_FORMAT
from domains.reminders.executor import COMPLETE_ACTION, RECURRING_COMPLETE_ACTION, SNOOZE_ACTION
from domains.reminders.handler import (
    complete_occurrence,
    complete_reminder,
    create_recurring,
    create_reminder,
    remove_reminder,
    snooze_reminder,
)
from domains.reminders.parser import extract_due_date
from logger import logger
from state import AssistantState
from utils import sanitize_for_log

EVENT_HINT = "Sorry, I couldn't work out when that is. Try `event: BBQ saturday 2pm`."

HELP_TEXT = """**What I can do**
🛒 `buy: milk, eggs` • `got: milk` • `list` • `clear list`
📅 `event: BBQ saturday 2pm` • `remove event: BBQ` • `events`
🧹 `cleaned: kitchen, bathroom` • `cleaning`
🔧 `fix: leaky tap` • `fixed: leaky tap` • `maintenance`
⏰ `remind me: bins tomorrow at 7pm` • `remind everyone: dinner at 6pm`
🔁 `daily: water plants` • `weekly: bins on tuesday` • `recurring: charge battery every 3 months`
🗑️ `remove reminder: bins` • `reminders`
🕐 `time` • `hello`"""

Handler = Callable[[InboundMessage, re.Match, datetime], CommandResult]

_LIST_ALIASES = {
    "list": "groceries",
    "groceries": "groceries",
    "events": "events",
    "cleaning": "cleaning",
    "maintenance": "maintenance",
    "reminders": "reminders",
}


def _rule(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE | re.DOTALL)


def _join(label: str, names: list[str]) -> Optional[str]:
    return f"{label}: {', '.join(names)}" if names else None


def _lines(*parts: Optional[str]) -> str:
    return "\n".join(p for p in parts if p)


class CommandRouter:
    """Routes chat messages and button presses to list/reminder handlers."""

    def __init__(self, state: AssistantState):
        self.state = state
        # Order matters: first match wins
        self._rules: list[tuple[re.Pattern, Handler]] = [
            (_rule(r'^buy:\s*(?P<args>.+)$'), self._buy),
            (_rule(r'^(?:i\s+)?got:\s*(?P<args>.+)$'), self._got),
            (_rule(r'^event:\s*(?P<args>.+)$'), self._add_event),
            (_rule(r'^remove\s+event:\s*(?P<args>.+)$'), self._remove_event),
            (_rule(r'^cleaned:\s*(?P<args>.+)$'), self._cleaned),
            (_rule(r'^(?:fix|maintenance):\s*(?P<args>.+)$'), self._fix),
            (_rule(r'^fixed:\s*(?P<args>.+)$'), self._fixed),
            (_rule(r'^remind(?:\s+me)?:\s*(?P<args>.+)$'), self._remind_me),
            (_rule(r'^remind\s+(?P<target>[^:]+?):\s*(?P<args>.+)$'), self._remind_other),
            (_rule(r'^(?P<kind>recurring|daily|weekly|monthly):\s*(?P<args>.+)$'), self._recurring),
            (_rule(r'^(?:remove|delete)\s+reminder:\s*(?P<args>.+)$'), self._remove_reminder),
            (_rule(r'^clear\s+(?:list|groceries)$'), self._clear_groceries),
            (_rule(rf'^(?P<list>{"|".join(_LIST_ALIASES)})$'), self._show),
            (_rule(r'^time$'), self._time),
            (_rule(r'^(?:hello|hi|hey)\b.*$'), self._hello),
            (_rule(r'^help$'), self._help),
        ]
        self._actions: dict[str, Callable[[InteractionEvent, datetime], CommandResult]] = {
            COMPLETE_ACTION: self._complete,
            SNOOZE_ACTION: self._snooze,
            RECURRING_COMPLETE_ACTION: self._complete_occurrence,
            CONFIRM_ACTION: self._confirm,
            CANCEL_ACTION: self._cancel,
        }

    def match(self, text: str) -> Optional[tuple[Handler, re.Match]]:
        """Find the first rule matching text."""
        text = text.strip()
        for pattern, handler in self._rules:
            match = pattern.match(text)
            if match:
                return handler, match
        return None

    async def handle_message(self, event: InboundMessage, now: Optional[datetime] = None) -> Optional[CommandResult]:
        """Handle a chat message.

        Returns:
            The command result, or None if the message was not a command
        """
        if event.is_bot:
            return None

        matched = self.match(event.text)
        if not matched:
            return None
        handler, match = matched
        now = now or self.state.now()

        logger.info(
            f"Command in #{event.channel_name} from {event.user_display_name}: "
            f"{sanitize_for_log(event.text)}"
        )

        try:
            async with self.state.reminders.lock:
                result = handler(event, match, now)
        except Exception as e:
            logger.error(f"Error handling command {handler.__name__}: {e}")
            return None

        await self._refresh(result.refresh, event.channel_id, now, create=True)

        if result.reply:
            try:
                await self.state.chat.post_message(event.channel_id, result.reply, buttons=result.buttons)
            except Exception as e:
                logger.error(f"Failed to send reply in {event.channel_id}: {e}")

        return result

    async def handle_interaction(self, event: InteractionEvent, now: Optional[datetime] = None) -> Optional[CommandResult]:
        """Handle a button press.

        Only applies the store change. The caller answers the interaction
        with the returned reply, then calls `refresh_after` to update anchors,
        so slow anchor edits never hold up the answer.
        """
        action = self._actions.get(event.action_id)
        if action is None:
            return None
        now = now or self.state.now()

        logger.info(f"Button {event.action_id}:{event.value} pressed by {event.user_display_name}")

        try:
            async with self.state.reminders.lock:
                result = action(event, now)
        except Exception as e:
            logger.error(f"Error handling button {event.action_id}: {e}")
            return CommandResult(reply="Something went wrong, please try again.")

        return result

    async def refresh_after(self, result: CommandResult, event: InteractionEvent, now: Optional[datetime] = None):
        """Update anchors touched by a button press, once it has been answered."""
        if result.refresh:
            await self._refresh(result.refresh, event.channel_id, now or self.state.now(), create=False)

    async def _refresh(self, names: list[str], channel_id: Optional[int], now: datetime, create: bool):
        """Upsert each list in this channel (if create) and wherever it's already anchored."""
        for name in names:
            channels = self.state.anchors.channels(name)
            if create and channel_id is not None and channel_id not in channels:
                channels.insert(0, channel_id)
            for cid in channels:
                await self.state.refresh(name, cid, now)

    # --- groceries ---

    def _buy(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        items = split_items(match.group("args"))
        if not items:
            return CommandResult(reply="Nothing to add. Try `buy: milk, eggs`.")
        added, existing = self.state.groceries.add(items, event.user_display_name, now)
        return CommandResult(
            reply=_lines(_join("Added to list", added), _join("Already on the list", existing)),
            refresh=["groceries"] if added else [],
        )

    def _got(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        items = split_items(match.group("args"))
        removed, missing = self.state.groceries.remove(items)
        return CommandResult(
            reply=_lines(_join("Removed from list", removed), _join("Not on the list", missing)),
            refresh=["groceries"] if removed else [],
        )

    def _clear_groceries(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        count = len(self.state.groceries)
        if not count:
            return CommandResult(reply="The grocery list is already empty.")

        def clear() -> CommandResult:
            cleared = self.state.groceries.clear()
            return CommandResult(reply=f"🧹 Cleared {cleared} item(s) from the grocery list.", refresh=["groceries"])

        return self.state.pending.request(
            f"Clear all {count} item(s) from the grocery list?",
            clear,
            event.user_display_name,
            now
        )

    # --- events ---

    def _add_event(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        parsed = extract_due_date(match.group("args"), reference=now, tz=self.state.tz)
        if not parsed:
            return CommandResult(reply=EVENT_HINT)
        name, start = parsed
        self.state.events.add(name, start, event.user_display_name, now)
        when = start.astimezone(self.state.tz).strftime(DISPLAY_FORMAT)
        return CommandResult(reply=f"Added event: **{name}** on {when}", refresh=["events"])

    def _remove_event(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        removed = self.state.events.remove(match.group("args"))
        if removed is None:
            return CommandResult(reply="Event not found. Use `events` to see upcoming events.")
        return CommandResult(reply=f"Removed event: {removed.name}", refresh=["events"])

    # --- cleaning & maintenance ---

    def _cleaned(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        tasks = split_items(match.group("args"))
        if not tasks:
            return CommandResult(reply="Nothing to log. Try `cleaned: kitchen`.")
        for task in tasks:
            self.state.cleaning.log(task, event.user_display_name, now)
        return CommandResult(reply=_join("Logged cleaning", tasks), refresh=["cleaning"])

    def _fix(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        items = split_items(match.group("args"))
        if not items:
            return CommandResult(reply="Nothing to add. Try `fix: leaky tap`.")
        added, existing = self.state.maintenance.add(items, event.user_display_name, now)
        return CommandResult(
            reply=_lines(_join("Added to maintenance", added), _join("Already on maintenance", existing)),
            refresh=["maintenance"] if added else [],
        )

    def _fixed(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        items = split_items(match.group("args"))
        removed, missing = self.state.maintenance.remove(items)
        return CommandResult(
            reply=_lines(_join("Marked fixed", removed), _join("Not on maintenance", missing)),
            refresh=["maintenance"] if removed else [],
        )

    # --- reminders ---

    def _remind_me(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return create_reminder(
            self.state.reminders,
            match.group("args"),
            created_by=event.user_display_name,
            channel_id=event.channel_id,
            now=now,
            target_user=event.user_display_name,
            target_user_id=event.user_id,
            tz=self.state.tz,
        )

    def _remind_other(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        target = match.group("target").strip()
        target_user_id = parse_mention(target)
        if target.lstrip("@").lower() in ("everyone", "all", "here"):
            target = "everyone"
        elif target_user_id is None:
            target = target.lstrip("@")
        else:
            target = event.mentions.get(target_user_id, target)
        return create_reminder(
            self.state.reminders,
            match.group("args"),
            created_by=event.user_display_name,
            channel_id=event.channel_id,
            now=now,
            target_user=target,
            target_user_id=target_user_id,
            tz=self.state.tz,
        )

    def _recurring(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return create_recurring(
            self.state.reminders,
            match.group("kind"),
            match.group("args"),
            created_by=event.user_display_name,
            channel_id=event.channel_id,
            now=now,
            target_user=event.user_display_name,
            target_user_id=event.user_id,
            tz=self.state.tz,
        )

    def _remove_reminder(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return remove_reminder(self.state.reminders, match.group("args"))

    # --- misc ---

    def _show(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return CommandResult(refresh=[_LIST_ALIASES[match.group("list").lower()]])

    def _time(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        local = now.astimezone(self.state.tz)
        return CommandResult(reply=f"🕐 It's {local:%H:%M} on {local:%A %d %B} ({self.state.tz})")

    def _hello(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return CommandResult(reply=f"Hello {event.user_display_name}! 👋 Type `help` to see what I can do.")

    def _help(self, event: InboundMessage, match: re.Match, now: datetime) -> CommandResult:
        return CommandResult(reply=HELP_TEXT)

    # --- buttons ---

    def _complete(self, event: InteractionEvent, now: datetime) -> CommandResult:
        return complete_reminder(self.state.reminders, event.value, event.user_display_name, now)

    def _snooze(self, event: InteractionEvent, now: datetime) -> CommandResult:
        return snooze_reminder(self.state.reminders, event.value, now, tz=self.state.tz)

    def _complete_occurrence(self, event: InteractionEvent, now: datetime) -> CommandResult:
        return complete_occurrence(self.state.reminders, event.value, event.user_display_name, tz=self.state.tz)

    def _confirm(self, event: InteractionEvent, now: datetime) -> CommandResult:
        return self.state.pending.confirm(event.value, event.user_display_name, now)

    def _cancel(self, event: InteractionEvent, now: datetime) -> CommandResult:
        return self.state.pending.cancel(event.value, now)
