"""Tests for two-step confirmations."""

from datetime import datetime, timedelta
from unittest.mock import Mock
from zoneinfo import ZoneInfo

from domains.base import CommandResult
from domains.confirmations import CANCEL_ACTION, CONFIRM_ACTION, EXPIRED_REPLY, PendingActions

NOW = datetime(2024, 1, 1, 10, 0, tzinfo=ZoneInfo("Europe/London"))


def action_id(result: CommandResult) -> str:
    return result.buttons[0].custom_id.partition(":")[2]


class TestPendingActions:

    def test_request_offers_confirm_and_cancel(self):
        pending = PendingActions(timeout=300)

        result = pending.request("Clear the list?", Mock(), "Sam", NOW)

        assert "Clear the list?" in result.reply
        assert [b.custom_id.partition(":")[0] for b in result.buttons] == [CONFIRM_ACTION, CANCEL_ACTION]
        assert result.buttons[0].style == "danger"
        assert action_id(result) in pending

    def test_confirm_runs_once(self):
        pending = PendingActions(timeout=300)
        callback = Mock(return_value=CommandResult(reply="Cleared"))
        prompt = pending.request("Clear the list?", callback, "Sam", NOW)

        first = pending.confirm(action_id(prompt), "Alex", NOW + timedelta(seconds=10))
        second = pending.confirm(action_id(prompt), "Alex", NOW + timedelta(seconds=20))

        callback.assert_called_once()
        assert first.reply == "Cleared"
        assert first.replace_prompt is True
        assert second.reply == EXPIRED_REPLY

    def test_expired(self):
        pending = PendingActions(timeout=300)
        callback = Mock()
        prompt = pending.request("Clear the list?", callback, "Sam", NOW)

        result = pending.confirm(action_id(prompt), "Sam", NOW + timedelta(seconds=301))

        assert result.reply == EXPIRED_REPLY
        callback.assert_not_called()

    def test_cancel(self):
        pending = PendingActions(timeout=300)
        callback = Mock()
        prompt = pending.request("Clear the list?", callback, "Sam", NOW)

        result = pending.cancel(action_id(prompt), NOW)

        assert result.reply == "Cancelled: Clear the list?"
        assert action_id(prompt) not in pending
        callback.assert_not_called()
