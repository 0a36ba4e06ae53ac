"""Reminders pinned list."""

from datetime import datetime, tzinfo

from domains.base import ListDomain
from .config import DISPLAY_FORMAT
from .store import ReminderStore


def _for_whom(target_user, created_by: str) -> str:
    if target_user == "everyone":
        return " _(for everyone)_"
    if target_user and target_user != created_by:
        return f" _(for {target_user})_"
    return f" _(set by {created_by})_"


class RemindersDomain(ListDomain):
    """Renders overdue, upcoming and recurring reminders from the store."""

    name = "reminders"
    title = "⏰ Reminders"
    empty_text = "No reminders set!"
    usage = (
        "Use `remind me: task tomorrow at 7pm` • `recurring: task every 3 months` • "
        "`remove reminder: task`"
    )
    color = 0xED4245

    def __init__(self, store: ReminderStore, tz: tzinfo):
        self.store = store
        self.tz = tz

    def _when(self, moment: datetime) -> str:
        return moment.astimezone(self.tz).strftime(DISPLAY_FORMAT)

    def render_lines(self, now: datetime) -> list[str]:
        lines = []

        overdue = self.store.overdue(now)
        if overdue:
            lines.append("**⚠️ Overdue**")
            for r in overdue:
                lines.append(f"• {r.message} - was due {self._when(r.due_date)}{_for_whom(r.target_user, r.created_by)}")

        upcoming = self.store.upcoming(now)
        if upcoming:
            if lines:
                lines.append("")
            lines.append("**📌 Upcoming**")
            for i, r in enumerate(upcoming, start=1):
                lines.append(f"{i}. {r.message} - {self._when(r.due_date)}{_for_whom(r.target_user, r.created_by)}")

        recurring = self.store.all_recurring()
        if recurring:
            if lines:
                lines.append("")
            lines.append("**🔁 Recurring**")
            for r in recurring:
                lines.append(f"• {r.message} - {r.frequency.describe()}{_for_whom(r.target_user, r.created_by)}")

        return lines
