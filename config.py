"""Global configuration for Household Assistant."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")

# Channels the assistant listens in (comma-separated IDs, empty = everywhere)
_channel_ids = os.getenv("ASSISTANT_CHANNEL_IDS", "")
ASSISTANT_CHANNEL_IDS = {int(cid.strip()) for cid in _channel_ids.split(",") if cid.strip()}

# Timezone used for parsing "tomorrow at 7pm" and for calendar-day checks
TIMEZONE = os.getenv("ASSISTANT_TIMEZONE", "Europe/London")

# Scheduler cadence
REMINDER_CHECK_SECONDS = int(os.getenv("REMINDER_CHECK_SECONDS", "60"))
RECURRING_CHECK_SECONDS = int(os.getenv("RECURRING_CHECK_SECONDS", "3600"))

# Interaction settings
SNOOZE_MINUTES = int(os.getenv("SNOOZE_MINUTES", "60"))
CONFIRMATION_TIMEOUT = int(os.getenv("CONFIRMATION_TIMEOUT", "300"))  # 5 minutes

# Logging
LOG_DIR = Path(os.getenv("LOCALAPPDATA", ".")) / "household-assistant" / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
