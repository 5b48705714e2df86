"""Dashboard and per-habit summary stats, all computed through garden.progress."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from garden.habits import active_habits
from garden.models import Habit, HabitStreak
from garden.progress import (
    DEFAULT_STREAK_MAX_DAYS,
    completed_days,
    completion_rate,
    current_streak,
    month_window,
    rank_by_streak,
    round_percentage,
    trailing_window,
)

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def habit_streak(habit: Habit, today: date, max_days: int = DEFAULT_STREAK_MAX_DAYS) -> HabitStreak:
    return HabitStreak(
        id=habit.id,
        name=habit.name,
        icon=habit.icon,
        color=habit.color,
        streak=current_streak(habit.logs, today, max_days),
        completed_today=today in completed_days(habit.logs),
    )


def habit_summary(habit: Habit, today: date, max_days: int = DEFAULT_STREAK_MAX_DAYS) -> dict[str, Any]:
    """Computed fields shown next to a habit in listings."""
    start, end = month_window(today.year, today.month, today)
    month = completion_rate(habit.logs, start, end)
    return {
        "streak": current_streak(habit.logs, today, max_days),
        "completedToday": today in completed_days(habit.logs),
        "monthPercentage": month.percentage,
        "monthCompleted": month.completed,
        "monthTotal": month.total,
    }


def dashboard_stats(
    habits: list[Habit],
    today: date,
    max_days: int = DEFAULT_STREAK_MAX_DAYS,
) -> dict[str, Any]:
    """Aggregate stats for the dashboard widgets.

    Only active habits count. Returns the "today" card, the streak ranking
    with its best habit, and a 7-day chart ending today.
    """
    habits = active_habits(habits)
    done_by_habit = {h.id: completed_days(h.logs) for h in habits}
    total = len(habits)

    streaks = [habit_streak(h, today, max_days) for h in habits]
    ranking = rank_by_streak(streaks)
    completed_today = sum(1 for s in streaks if s.completed_today)

    start, end = trailing_window(today, 7)
    weekly = []
    day = start
    while day <= end:
        completed = sum(1 for done in done_by_habit.values() if day in done)
        weekly.append({
            "date": day.isoformat(),
            "day": DAY_NAMES[day.weekday()],
            "completed": completed,
            "total": total,
            "percentage": round_percentage(completed, total),
        })
        day += timedelta(days=1)

    completions_this_week = sum(completion_rate(h.logs, start, end).completed for h in habits)

    return {
        "overview": {"totalHabits": total},
        "today": {
            "habitsCompleted": completed_today,
            "habitsTotal": total,
            "percentage": round_percentage(completed_today, total),
        },
        "streaks": {
            "habits": [s.to_dict() for s in ranking.habits],
            "best": ranking.best.to_dict() if ranking.best else None,
            "totalCompletionsThisWeek": completions_this_week,
        },
        "weeklyProgress": weekly,
    }
