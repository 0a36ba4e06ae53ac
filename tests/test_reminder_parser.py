"""Tests for due-date and recurrence parsing."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from freezegun import freeze_time

from domains.reminders.models import Custom, Daily, FrequencyUnit, Monthly, Weekly
from domains.reminders.parser import (
    extract_due_date,
    find_weekday,
    parse_due_date,
    parse_frequency,
    strip_frequency,
    strip_weekday,
)

LONDON = ZoneInfo("Europe/London")
MIDNIGHT = datetime(2024, 1, 1, 0, 0, tzinfo=LONDON)  # Monday
MORNING = datetime(2024, 1, 1, 10, 0, tzinfo=LONDON)


class TestParseDueDate:
    """Explicit date/time phrases."""

    def test_tomorrow_at_7pm(self):
        assert parse_due_date("tomorrow at 7pm", MIDNIGHT, LONDON) == datetime(2024, 1, 2, 19, 0, tzinfo=LONDON)

    def test_weekday_with_time(self):
        assert parse_due_date("friday 9am", MORNING, LONDON) == datetime(2024, 1, 5, 9, 0, tzinfo=LONDON)

    def test_minutes_and_24_hour_clock(self):
        assert parse_due_date("tomorrow 7:30pm", MORNING, LONDON) == datetime(2024, 1, 2, 19, 30, tzinfo=LONDON)
        assert parse_due_date("tomorrow 18:45", MORNING, LONDON) == datetime(2024, 1, 2, 18, 45, tzinfo=LONDON)

    def test_noon(self):
        assert parse_due_date("tomorrow at noon", MORNING, LONDON) == datetime(2024, 1, 2, 12, 0, tzinfo=LONDON)

    def test_bare_time_already_passed_rolls_to_tomorrow(self):
        evening = datetime(2024, 1, 1, 20, 0, tzinfo=LONDON)
        assert parse_due_date("at 7pm", evening, LONDON) == datetime(2024, 1, 2, 19, 0, tzinfo=LONDON)

    def test_bare_time_later_today(self):
        assert parse_due_date("at 6pm", MORNING, LONDON) == datetime(2024, 1, 1, 18, 0, tzinfo=LONDON)

    def test_same_weekday_passed_rolls_a_week(self):
        assert parse_due_date("monday 9am", MORNING, LONDON) == datetime(2024, 1, 8, 9, 0, tzinfo=LONDON)

    def test_next_weekday(self):
        assert parse_due_date("next monday", MORNING, LONDON) == datetime(2024, 1, 8, 9, 0, tzinfo=LONDON)

    def test_date_only_defaults(self):
        assert parse_due_date("tomorrow", MORNING, LONDON) == datetime(2024, 1, 2, 9, 0, tzinfo=LONDON)
        assert parse_due_date("tonight", MORNING, LONDON) == datetime(2024, 1, 1, 20, 0, tzinfo=LONDON)

    def test_day_and_month(self):
        assert parse_due_date("15th march 9am", MORNING, LONDON) == datetime(2024, 3, 15, 9, 0, tzinfo=LONDON)
        assert parse_due_date("march 15 at 2pm", MORNING, LONDON) == datetime(2024, 3, 15, 14, 0, tzinfo=LONDON)

    def test_past_day_and_month_is_next_year(self):
        later = datetime(2024, 1, 10, 10, 0, tzinfo=LONDON)
        assert parse_due_date("5 jan", later, LONDON) == datetime(2025, 1, 5, 9, 0, tzinfo=LONDON)

    def test_day_of_month(self):
        later = datetime(2024, 1, 10, 10, 0, tzinfo=LONDON)
        assert parse_due_date("on the 5th", MORNING, LONDON) == datetime(2024, 1, 5, 9, 0, tzinfo=LONDON)
        assert parse_due_date("the 5th", later, LONDON) == datetime(2024, 2, 5, 9, 0, tzinfo=LONDON)

    def test_day_of_month_skips_short_months(self):
        february = datetime(2024, 2, 10, 10, 0, tzinfo=LONDON)
        assert parse_due_date("the 31st", february, LONDON) == datetime(2024, 3, 31, 9, 0, tzinfo=LONDON)

    def test_ordinal_with_month_is_that_date(self):
        assert parse_due_date("the 5th of march", MORNING, LONDON) == datetime(2024, 3, 5, 9, 0, tzinfo=LONDON)

    def test_relative_phrase_uses_dateparser(self):
        assert parse_due_date("in 2 hours", MIDNIGHT, LONDON) == MIDNIGHT + timedelta(hours=2)

    def test_unparseable_returns_none(self):
        assert parse_due_date("call mum", MORNING, LONDON) is None
        assert parse_due_date("", MORNING, LONDON) is None

    @freeze_time("2024-01-01 12:00:00")
    def test_defaults_to_current_time(self):
        assert parse_due_date("tomorrow at 7pm", tz=LONDON) == datetime(2024, 1, 2, 19, 0, tzinfo=LONDON)


class TestExtractDueDate:
    """Splitting the task text from its due date."""

    def test_strips_time_phrase(self):
        task, due = extract_due_date("take the bins out tomorrow at 7pm", MIDNIGHT, LONDON)
        assert task == "take the bins out"
        assert due == datetime(2024, 1, 2, 19, 0, tzinfo=LONDON)

    def test_time_before_task(self):
        task, due = extract_due_date("friday 9am call the plumber", MORNING, LONDON)
        assert task == "call the plumber"
        assert due == datetime(2024, 1, 5, 9, 0, tzinfo=LONDON)

    def test_leading_to_is_dropped(self):
        task, _ = extract_due_date("tomorrow at 8am to feed the cat", MORNING, LONDON)
        assert task == "feed the cat"

    def test_no_date(self):
        assert extract_due_date("call mum sometime", MORNING, LONDON) is None

    def test_no_task(self):
        assert extract_due_date("tomorrow at 7pm", MORNING, LONDON) is None

    def test_words_starting_like_months_stay_in_task(self):
        assert extract_due_date("return 3 novels tomorrow at 5pm", MORNING, LONDON) == (
            "return 3 novels", datetime(2024, 1, 2, 17, 0, tzinfo=LONDON)
        )
        assert extract_due_date("buy 2 mars bars tomorrow at 7pm", MORNING, LONDON) == (
            "buy 2 mars bars", datetime(2024, 1, 2, 19, 0, tzinfo=LONDON)
        )
        assert extract_due_date("pack 2 separate bags tomorrow at 9am", MORNING, LONDON) == (
            "pack 2 separate bags", datetime(2024, 1, 2, 9, 0, tzinfo=LONDON)
        )

    def test_day_of_month_is_stripped(self):
        task, due = extract_due_date("dentist on the 5th at 3pm", MORNING, LONDON)
        assert task == "dentist"
        assert due == datetime(2024, 1, 5, 15, 0, tzinfo=LONDON)


class TestParseFrequency:
    """Recurrence phrases, first match wins."""

    def test_daily(self):
        assert parse_frequency("water plants daily") == Daily()
        assert parse_frequency("every day feed fish") == Daily()

    def test_weekday(self):
        assert parse_frequency("bins every tuesday") == Weekly(1)
        assert parse_frequency("weekly on friday clean fridge") == Weekly(4)

    def test_plain_weekly_anchors_to_reference_day(self):
        wednesday = datetime(2024, 1, 3, 10, 0, tzinfo=LONDON)
        assert parse_frequency("weekly catch-up", wednesday, LONDON) == Weekly(2)

    def test_monthly(self):
        assert parse_frequency("pay rent monthly") == Monthly()

    def test_every_other(self):
        assert parse_frequency("every other week hoover stairs") == Custom(2, FrequencyUnit.WEEKS)

    def test_every_n(self):
        assert parse_frequency("charge battery every 3 months") == Custom(3, FrequencyUnit.MONTHS)
        assert parse_frequency("every 10 days check tyres") == Custom(10, FrequencyUnit.DAYS)

    def test_keyword_beats_interval(self):
        assert parse_frequency("daily, every 3 days") == Daily()

    def test_zero_interval_rejected(self):
        assert parse_frequency("every 0 days") is None

    def test_nothing_recognised(self):
        assert parse_frequency("whenever you like") is None


class TestStripping:

    def test_strip_frequency(self):
        assert strip_frequency("charge battery every 3 months") == "charge battery"
        assert strip_frequency("water plants") == "water plants"

    def test_weekday_helpers(self):
        assert find_weekday("bins on Tuesday") == 1
        assert find_weekday("bins") is None
        assert strip_weekday("bins on tuesday") == "bins"
