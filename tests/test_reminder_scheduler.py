"""Tests for reminder delivery ticks and scheduler registration."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from domains.reminders.config import DUE_CHECK_JOB_ID, RECURRING_CHECK_JOB_ID
from domains.reminders.executor import COMPLETE_ACTION, SNOOZE_ACTION, deliver_reminder
from domains.reminders.models import Daily, RecurringReminder, Reminder
from domains.reminders.scheduler import ReminderScheduler
from domains.reminders.store import ReminderStore

LONDON = ZoneInfo("Europe/London")
NOW = datetime(2024, 1, 1, 10, 0, tzinfo=LONDON)


def add_reminder(store, due=NOW, **kwargs):
    return store.add_one_time(Reminder(
        id=kwargs.pop("id", "rem_1"),
        message="take the bins out",
        due_date=due,
        created_by="Sam",
        created_at=NOW - timedelta(hours=1),
        channel_id=555,
        **kwargs
    ))


def add_recurring(store):
    return store.add_recurring(RecurringReminder(
        id="rec_1",
        message="water plants",
        frequency=Daily(),
        created_by="Sam",
        created_at=NOW,
        channel_id=555,
    ))


class TestDueCheck:

    @pytest.mark.asyncio
    async def test_delivers_once(self, chat):
        store = ReminderStore()
        reminder = add_reminder(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        assert await scheduler.check_due(NOW) == 1
        assert await scheduler.check_due(NOW + timedelta(minutes=1)) == 0

        assert reminder.sent is True
        chat.post_message.assert_called_once()

    @pytest.mark.asyncio
    async def test_not_due_yet(self, chat):
        store = ReminderStore()
        add_reminder(store, due=NOW + timedelta(minutes=5))
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        assert await scheduler.check_due(NOW) == 0
        chat.post_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_delivery_retried_next_tick(self, chat):
        store = ReminderStore()
        reminder = add_reminder(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)
        chat.post_message.side_effect = [RuntimeError("gateway down"), 1000]

        assert await scheduler.check_due(NOW) == 0
        assert reminder.sent is False

        assert await scheduler.check_due(NOW + timedelta(minutes=1)) == 1
        assert reminder.sent is True

    @pytest.mark.asyncio
    async def test_snoozed_reminder_fires_again_after_delay(self, chat):
        store = ReminderStore()
        reminder = add_reminder(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)
        await scheduler.check_due(NOW)

        store.snooze(reminder.id, NOW + timedelta(hours=1))

        assert await scheduler.check_due(NOW + timedelta(minutes=30)) == 0
        assert await scheduler.check_due(NOW + timedelta(minutes=61)) == 1
        assert chat.post_message.call_count == 2

    @pytest.mark.asyncio
    async def test_completed_reminder_not_delivered(self, chat):
        store = ReminderStore()
        add_reminder(store, completed=True)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        assert await scheduler.check_due(NOW) == 0

    @pytest.mark.asyncio
    async def test_on_change_after_delivery(self, chat):
        store = ReminderStore()
        add_reminder(store)
        on_change = AsyncMock()
        scheduler = ReminderScheduler(store, chat, tz=LONDON, on_change=on_change)

        await scheduler.check_due(NOW)
        await scheduler.check_due(NOW)

        on_change.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_on_change_failure_is_logged(self, chat):
        store = ReminderStore()
        add_reminder(store)
        scheduler = ReminderScheduler(
            store, chat, tz=LONDON, on_change=AsyncMock(side_effect=RuntimeError("boom"))
        )

        assert await scheduler.check_due(NOW) == 1

    @pytest.mark.asyncio
    async def test_tick_waits_for_store_lock(self, chat):
        store = ReminderStore()
        add_reminder(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        async with store.lock:
            task = asyncio.create_task(scheduler.check_due(NOW))
            await asyncio.sleep(0)
            chat.post_message.assert_not_called()

        assert await task == 1


class TestRecurringCheck:

    @pytest.mark.asyncio
    async def test_fires_once_per_day(self, chat):
        store = ReminderStore()
        rule = add_recurring(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        assert await scheduler.check_recurring(NOW) == 1
        assert rule.last_fired == NOW
        assert await scheduler.check_recurring(NOW + timedelta(hours=1)) == 0
        assert await scheduler.check_recurring(NOW + timedelta(days=1)) == 1

    @pytest.mark.asyncio
    async def test_occurrence_button(self, chat):
        store = ReminderStore()
        add_recurring(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)

        await scheduler.check_recurring(NOW)

        buttons = chat.post_message.call_args.kwargs["buttons"]
        assert buttons[0].custom_id == f"recurring_complete:rec_1@{int(NOW.timestamp())}"

    @pytest.mark.asyncio
    async def test_failed_occurrence_keeps_last_fired(self, chat):
        store = ReminderStore()
        rule = add_recurring(store)
        scheduler = ReminderScheduler(store, chat, tz=LONDON)
        chat.post_message.side_effect = RuntimeError("gateway down")

        assert await scheduler.check_recurring(NOW) == 0
        assert rule.last_fired is None


class TestDelivery:

    @pytest.mark.asyncio
    async def test_prompt_mentions_target_and_has_buttons(self, chat):
        store = ReminderStore()
        reminder = add_reminder(store, target_user="Sam", target_user_id=42)

        assert await deliver_reminder(chat, reminder)

        channel_id, text = chat.post_message.call_args.args
        buttons = chat.post_message.call_args.kwargs["buttons"]
        assert channel_id == 555
        assert "<@42>" in text
        assert "> take the bins out" in text
        assert [b.custom_id for b in buttons] == [f"{COMPLETE_ACTION}:rem_1", f"{SNOOZE_ACTION}:rem_1"]

    @pytest.mark.asyncio
    async def test_everyone(self, chat):
        store = ReminderStore()
        reminder = add_reminder(store, target_user="everyone")

        await deliver_reminder(chat, reminder)

        assert "@everyone" in chat.post_message.call_args.args[1]


class TestRegistration:

    def test_registers_both_jobs(self, chat):
        scheduler = AsyncIOScheduler()
        ReminderScheduler(ReminderStore(), chat, tz=LONDON).register(scheduler)

        job_ids = [job.id for job in scheduler.get_jobs()]

        assert DUE_CHECK_JOB_ID in job_ids
        assert RECURRING_CHECK_JOB_ID in job_ids
