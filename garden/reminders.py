"""Habit reminder scheduling.

The caller owns both the clock and the record of reminders already shown;
``due_reminders`` only reports what should fire at *now*.
"""

from __future__ import annotations

from datetime import datetime
from typing import Collection, MutableSet

from garden.habits import active_habits
from garden.models import Habit, Reminder
from garden.progress import completed_days


def reminder_id(habit_id: str, now: datetime) -> str:
    return f"{habit_id}-{now.date().isoformat()}"


def due_reminders(habits: list[Habit], now: datetime, shown: Collection[str] = ()) -> list[Reminder]:
    """Reminders that should fire at *now* (already in the workspace timezone).

    A habit is due when its reminder time matches the current minute, it is
    not yet completed today, and its reminder for today is not in *shown*.
    """
    current = now.strftime("%H:%M")
    today = now.date()
    due = []
    for habit in active_habits(habits):
        if not habit.reminder_enabled or habit.reminder_time != current:
            continue
        rid = reminder_id(habit.id, now)
        if rid in shown:
            continue
        if today in completed_days(habit.logs):
            continue
        due.append(Reminder(
            id=rid,
            habit_id=habit.id,
            title=f"Time for {habit.name}!",
            message=f"Don't forget to complete your habit today ({format_time(habit.reminder_time)})",
            icon=habit.icon,
            color=habit.color,
            timestamp=now.isoformat(timespec="seconds"),
        ))
    return due


def prune_shown(shown: MutableSet[str], now: datetime) -> None:
    """Forget delivered reminder ids from days before *now*."""
    cutoff = now.date().isoformat()
    # ids end in YYYY-MM-DD, which sorts chronologically as text
    for rid in [r for r in shown if r[-10:] < cutoff]:
        shown.discard(rid)


def format_time(hhmm: str) -> str:
    """'14:05' -> '2:05 PM'."""
    hours, minutes = (int(x) for x in hhmm.split(":"))
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"
