"""Tests for garden/reminders.py."""

from datetime import datetime, timezone

from garden.habits import load_habits
from garden.reminders import due_reminders, format_time, prune_shown, reminder_id

SEVEN_AM = datetime(2024, 3, 15, 7, 0, tzinfo=timezone.utc)


def test_due_reminders_skips_completed_today(workspace):
    due = due_reminders(load_habits(workspace), SEVEN_AM)
    assert [r.habit_id for r in due] == ["water"]
    assert due[0].id == "water-2024-03-15"
    assert due[0].title == "Time for Drink water!"


def test_due_reminders_respects_shown(workspace):
    habits = load_habits(workspace)
    shown = {reminder_id("water", SEVEN_AM)}
    assert due_reminders(habits, SEVEN_AM, shown) == []
    assert shown == {"water-2024-03-15"}


def test_due_reminders_other_minute(workspace):
    later = SEVEN_AM.replace(minute=1)
    assert due_reminders(load_habits(workspace), later) == []


def test_due_reminders_skips_archived_and_disabled(workspace):
    habits = load_habits(workspace)
    for h in habits:
        h.reminder_enabled = h.id != "water"
        h.reminder_time = "07:00"
        h.logs = []
    due = due_reminders(habits, SEVEN_AM)
    assert sorted(r.habit_id for r in due) == ["read", "run"]


def test_reminder_to_dict(workspace):
    d = due_reminders(load_habits(workspace), SEVEN_AM)[0].to_dict()
    assert d["type"] == "reminder"
    assert d["habitId"] == "water"


def test_format_time():
    assert format_time("14:05") == "2:05 PM"
    assert format_time("00:30") == "12:30 AM"
    assert format_time("12:00") == "12:00 PM"
    assert format_time("07:00") == "7:00 AM"


def test_reminder_message_shows_time(workspace):
    due = due_reminders(load_habits(workspace), SEVEN_AM)
    assert due[0].message == "Don't forget to complete your habit today (7:00 AM)"


def test_prune_shown_drops_earlier_days():
    shown = {"water-2024-03-13", "run-2024-03-14", "water-2024-03-15", "a-b-2024-03-15"}
    prune_shown(shown, SEVEN_AM)
    assert shown == {"water-2024-03-15", "a-b-2024-03-15"}
