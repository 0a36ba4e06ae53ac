"""Add-to-calendar deep links for events.

Every event is assumed to last one hour.
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import quote

EVENT_DURATION = timedelta(hours=1)


def _compact_utc(when: datetime) -> str:
    return when.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _iso_utc(when: datetime) -> str:
    return when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def google_link(name: str, start: datetime) -> str:
    end = start + EVENT_DURATION
    return (
        "https://calendar.google.com/calendar/render?action=TEMPLATE"
        f"&text={quote(name)}"
        f"&dates={_compact_utc(start)}/{_compact_utc(end)}"
    )


def outlook_link(name: str, start: datetime) -> str:
    end = start + EVENT_DURATION
    return (
        "https://outlook.live.com/calendar/0/deeplink/compose?path=/calendar/action/compose&rru=addevent"
        f"&subject={quote(name)}"
        f"&startdt={quote(_iso_utc(start))}"
        f"&enddt={quote(_iso_utc(end))}"
    )


def yahoo_link(name: str, start: datetime) -> str:
    end = start + EVENT_DURATION
    return (
        "https://calendar.yahoo.com/?v=60"
        f"&title={quote(name)}"
        f"&st={_compact_utc(start)}"
        f"&et={_compact_utc(end)}"
    )


def calendar_links(name: str, start: datetime) -> dict[str, str]:
    """Links keyed by service name, in display order."""
    return {
        "Google": google_link(name, start),
        "Outlook": outlook_link(name, start),
        "Yahoo": yahoo_link(name, start),
    }
