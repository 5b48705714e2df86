"""Tests for garden/progress.py: streaks, completion rates and ranking."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from garden.models import HabitLogEntry, HabitStreak
from garden.progress import (
    InvalidArgumentError,
    completed_days,
    completion_rate,
    current_streak,
    is_completed_on,
    longest_streak,
    month_window,
    rank_by_streak,
    round_percentage,
    to_day,
    trailing_window,
)

REF = date(2024, 1, 31)


def run_of(end: date, n: int) -> list[HabitLogEntry]:
    """n consecutive completed days ending on *end*."""
    return [HabitLogEntry(date=end - timedelta(days=i)) for i in range(n)]


# ── Membership ────────────────────────────────────────────────


def test_is_completed_on():
    entries = [
        HabitLogEntry(date=date(2024, 1, 1), completed=True),
        HabitLogEntry(date=date(2024, 1, 2), completed=False, note="skipped"),
    ]
    assert is_completed_on(entries, date(2024, 1, 1)) is True
    assert is_completed_on(entries, date(2024, 1, 2)) is False
    assert is_completed_on(entries, date(2024, 1, 3)) is False
    assert is_completed_on([], date(2024, 1, 3)) is False


def test_completed_days_rejects_duplicate_dates():
    entries = [HabitLogEntry(date=date(2024, 1, 1)), HabitLogEntry(date=date(2024, 1, 1), completed=False)]
    with pytest.raises(InvalidArgumentError, match="Duplicate"):
        completed_days(entries)


def test_datetime_is_not_a_calendar_day():
    with pytest.raises(InvalidArgumentError):
        is_completed_on([], datetime(2024, 1, 1, 12, 0))
    with pytest.raises(InvalidArgumentError):
        completed_days([HabitLogEntry(date=datetime(2024, 1, 1, 12, 0))])


# ── Streaks ───────────────────────────────────────────────────


def test_streak_today_incomplete_is_skipped():
    entries = [
        HabitLogEntry(date=date(2024, 1, 1)),
        HabitLogEntry(date=date(2024, 1, 2)),
        HabitLogEntry(date=date(2024, 1, 3), completed=False, note="later"),
    ]
    assert current_streak(entries, date(2024, 1, 3)) == 2


def test_streak_empty():
    assert current_streak([], REF) == 0


def test_streak_all_days_complete():
    n = 9
    assert current_streak(run_of(REF, n + 1), REF) == n + 1


def test_streak_through_yesterday():
    n = 6
    assert current_streak(run_of(REF - timedelta(days=1), n), REF) == n


def test_streak_yesterday_missing_resets():
    entries = run_of(REF - timedelta(days=2), 20) + [HabitLogEntry(date=REF)]
    assert current_streak(entries, REF) == 1
    entries = run_of(REF - timedelta(days=2), 20)
    assert current_streak(entries, REF) == 0


def test_streak_ignores_future_entries():
    entries = [HabitLogEntry(date=REF + timedelta(days=1)), HabitLogEntry(date=REF + timedelta(days=2))]
    assert current_streak(entries, REF) == 0


def test_streak_capped_by_max_days():
    entries = run_of(REF, 500)
    assert current_streak(entries, REF) == 365
    assert current_streak(entries, REF, max_days=10) == 10


def test_streak_invalid_max_days():
    with pytest.raises(InvalidArgumentError):
        current_streak([], REF, max_days=0)


def test_streak_bounded_by_history():
    entries = run_of(REF - timedelta(days=3), 4)
    earliest = min(e.date for e in entries)
    streak = current_streak(entries, REF)
    assert 0 <= streak <= (REF - earliest).days + 1


def test_streak_is_idempotent():
    entries = run_of(REF, 5)
    assert current_streak(entries, REF) == current_streak(entries, REF)


def test_longest_streak():
    entries = run_of(date(2024, 1, 10), 4) + run_of(date(2024, 1, 20), 2)
    assert longest_streak(entries) == 4
    assert longest_streak([]) == 0


# ── Completion rate ───────────────────────────────────────────


def test_round_percentage_half_up():
    assert round_percentage(1, 8) == 13  # 12.5
    assert round_percentage(1, 200) == 1  # 0.5
    assert round_percentage(1, 3) == 33
    assert round_percentage(2, 3) == 67
    assert round_percentage(5, 0) == 0


def test_completion_rate_single_day():
    day = date(2024, 2, 1)
    done = completion_rate([HabitLogEntry(date=day)], day, day)
    missed = completion_rate([], day, day)
    assert (done.total, done.percentage) == (1, 100)
    assert (missed.total, missed.percentage) == (1, 0)


def test_completion_rate_leap_february():
    rate = completion_rate([HabitLogEntry(date=date(2024, 2, 1))], date(2024, 2, 1), date(2024, 2, 29))
    assert rate.completed == 1
    assert rate.total == 29
    assert rate.percentage == 3


def test_completion_rate_empty_entries():
    rate = completion_rate([], date(2024, 1, 1), date(2024, 1, 10))
    assert rate.to_dict() == {"completed": 0, "total": 10, "percentage": 0}


def test_completion_rate_ignores_entries_outside_window():
    entries = run_of(date(2024, 1, 20), 20)
    rate = completion_rate(entries, date(2024, 1, 5), date(2024, 1, 7))
    assert rate.completed == 3


def test_completion_rate_monotonic_when_widening():
    entries = run_of(date(2024, 1, 20), 5) + [HabitLogEntry(date=date(2024, 1, 2))]
    narrow = completion_rate(entries, date(2024, 1, 10), date(2024, 1, 18))
    wide = completion_rate(entries, date(2024, 1, 1), date(2024, 1, 25))
    assert wide.completed >= narrow.completed
    assert wide.total >= narrow.total


def test_completion_rate_rejects_reversed_window():
    with pytest.raises(InvalidArgumentError, match="after end"):
        completion_rate([], date(2024, 1, 10), date(2024, 1, 1))


# ── Windows ───────────────────────────────────────────────────


def test_trailing_window():
    assert trailing_window(REF, 7) == (date(2024, 1, 25), REF)
    assert trailing_window(REF, 1) == (REF, REF)
    with pytest.raises(InvalidArgumentError):
        trailing_window(REF, 0)


def test_month_window_current_past_and_future():
    today = date(2024, 3, 15)
    assert month_window(2024, 3, today) == (date(2024, 3, 1), today)
    assert month_window(2024, 2, today) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_window(2024, 4, today) == (date(2024, 4, 1), date(2024, 4, 30))
    with pytest.raises(InvalidArgumentError):
        month_window(2024, 13, today)


@pytest.mark.parametrize("year, month", [(10000, 1), (0, 3), (2024, 0), (2024, -1)])
def test_month_window_rejects_out_of_range(year, month):
    with pytest.raises(InvalidArgumentError):
        month_window(year, month, date(2024, 3, 15))


# ── Ranking ───────────────────────────────────────────────────


def test_rank_by_streak_stable_ties():
    habits = [HabitStreak(id="a", streak=3), HabitStreak(id="b", streak=5), HabitStreak(id="c", streak=5)]
    ranking = rank_by_streak(habits)
    assert [h.streak for h in ranking.habits] == [5, 5, 3]
    assert [h.id for h in ranking.habits] == ["b", "c", "a"]
    assert ranking.best.id == "b"


def test_rank_by_streak_zero_has_no_best():
    habits = [HabitStreak(id="a", streak=0), HabitStreak(id="b", streak=0)]
    assert rank_by_streak(habits).best is None
    assert rank_by_streak(habits, include_zero=True).best.id == "a"
    assert rank_by_streak([]).best is None


# ── Day normalization ─────────────────────────────────────────


def test_to_day_iso_date_and_date():
    assert to_day("2024-03-01") == date(2024, 3, 1)
    assert to_day(date(2024, 3, 1)) == date(2024, 3, 1)


def test_to_day_converts_to_timezone():
    # 02:00 UTC on Mar 1 is still Feb 29 in New York
    assert to_day("2024-03-01T02:00:00Z") == date(2024, 3, 1)
    assert to_day("2024-03-01T02:00:00Z", ZoneInfo("America/New_York")) == date(2024, 2, 29)
    assert to_day(datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc), ZoneInfo("Asia/Tokyo")) == date(2024, 3, 2)


def test_to_day_naive_datetime_is_utc():
    assert to_day(datetime(2024, 3, 1, 23, 30), ZoneInfo("Asia/Tokyo")) == date(2024, 3, 2)


def test_to_day_rejects_garbage():
    with pytest.raises(InvalidArgumentError):
        to_day("not-a-date")
    with pytest.raises(InvalidArgumentError):
        to_day("")
    with pytest.raises(InvalidArgumentError):
        to_day(12345)
