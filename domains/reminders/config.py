"""Reminders domain configuration."""

from zoneinfo import ZoneInfo

from config import TIMEZONE, SNOOZE_MINUTES, REMINDER_CHECK_SECONDS, RECURRING_CHECK_SECONDS

# Timezone every "tomorrow at 7pm" is resolved in (never the host's)
LOCAL_TZ = ZoneInfo(TIMEZONE)

# Hour used when a date is given without a time ("remind me: bins tomorrow")
DEFAULT_HOUR = 9
TONIGHT_HOUR = 20

# Snooze button delay
SNOOZE_DELAY_MINUTES = SNOOZE_MINUTES

# Scheduler job ids and cadence
DUE_CHECK_JOB_ID = "reminder_due_check"
RECURRING_CHECK_JOB_ID = "reminder_recurring_check"
DUE_CHECK_SECONDS = REMINDER_CHECK_SECONDS
RECURRING_CHECK_SECONDS = RECURRING_CHECK_SECONDS

# Display format for due dates
DISPLAY_FORMAT = "%a %d %b %H:%M"

REPHRASE_HINT = (
    "Sorry, I couldn't work out when. Try something like "
    "`remind me: take the bins out tomorrow at 7pm` or `remind me: call mum friday 9am`."
)

FREQUENCY_HINT = (
    "Sorry, I couldn't work out how often. Try `daily: water plants`, "
    "`weekly: bins on tuesday` or `recurring: charge battery every 3 months`."
)
