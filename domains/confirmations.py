"""Two-step confirmations for destructive commands.

`clear list` posts Confirm/Cancel buttons backed by a pending-action record.
Records expire after CONFIRMATION_TIMEOUT; pressing a button after that
gets an "expired" reply.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from config import CONFIRMATION_TIMEOUT
from logger import logger
from .base import ButtonSpec, CommandResult

CONFIRM_ACTION = "confirm_action"
CANCEL_ACTION = "cancel_action"

EXPIRED_REPLY = "That action has expired. Please run the command again."


@dataclass
class PendingAction:
    """A destructive action waiting for confirmation."""

    id: str
    description: str
    callback: Callable[[], CommandResult]
    requested_by: str
    expires_at: datetime


class PendingActions:
    """Pending confirmations keyed by action ID."""

    def __init__(self, timeout: int = CONFIRMATION_TIMEOUT):
        self.timeout = timeout
        self._pending: dict[str, PendingAction] = {}

    def _discard_expired(self, now: datetime) -> None:
        expired = [k for k, v in self._pending.items() if v.expires_at <= now]
        for k in expired:
            logger.info(f"Pending action {k} expired")
            del self._pending[k]

    def request(
        self,
        description: str,
        callback: Callable[[], CommandResult],
        requested_by: str,
        now: datetime
    ) -> CommandResult:
        """Record an action and return the confirmation prompt."""
        self._discard_expired(now)
        action = PendingAction(
            id=uuid.uuid4().hex[:8],
            description=description,
            callback=callback,
            requested_by=requested_by,
            expires_at=now + timedelta(seconds=self.timeout),
        )
        self._pending[action.id] = action

        minutes = max(1, self.timeout // 60)
        return CommandResult(
            reply=f"⚠️ {description}\n_Expires in {minutes} min_",
            buttons=[
                ButtonSpec("Confirm", f"{CONFIRM_ACTION}:{action.id}", "danger"),
                ButtonSpec("Cancel", f"{CANCEL_ACTION}:{action.id}", "secondary"),
            ],
        )

    def confirm(self, action_id: str, confirmed_by: str, now: datetime) -> CommandResult:
        """Run the pending action once."""
        self._discard_expired(now)
        action = self._pending.pop(action_id, None)
        if action is None:
            return CommandResult(reply=EXPIRED_REPLY, replace_prompt=True)

        logger.info(f"Pending action {action_id} confirmed by {confirmed_by}")
        result = action.callback()
        result.replace_prompt = True
        return result

    def cancel(self, action_id: str, now: datetime) -> CommandResult:
        self._discard_expired(now)
        action = self._pending.pop(action_id, None)
        if action is None:
            return CommandResult(reply=EXPIRED_REPLY, replace_prompt=True)
        return CommandResult(reply=f"Cancelled: {action.description}", replace_prompt=True)

    def __contains__(self, action_id: str) -> bool:
        return action_id in self._pending
