"""Month calendar view of a habit's completions."""

from __future__ import annotations

from calendar import Calendar, month_name
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from garden.models import CompletionRate
from garden.progress import (
    DEFAULT_STREAK_MAX_DAYS,
    completed_days,
    completion_rate,
    current_streak,
    month_window,
)

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass
class DayCell:
    day: date
    completed: bool = False
    is_today: bool = False
    is_future: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "completed": self.completed,
            "isToday": self.is_today,
            "isFuture": self.is_future,
        }


@dataclass
class MonthView:
    year: int
    month: int
    month_name: str
    weekdays: list[str] = field(default_factory=list)
    weeks: list[list[DayCell | None]] = field(default_factory=list)
    stats: CompletionRate = field(default_factory=CompletionRate)
    streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "monthName": self.month_name,
            "weekdays": self.weekdays,
            "weeks": [[c.to_dict() if c else None for c in week] for week in self.weeks],
            "stats": self.stats.to_dict(),
            "streak": self.streak,
        }


def build_month(
    entries: Iterable[Any],
    year: int,
    month: int,
    today: date,
    week_start: int = 6,
    streak_max_days: int = DEFAULT_STREAK_MAX_DAYS,
) -> MonthView:
    """Lay out *month* as weeks of day cells, padded with None.

    *week_start* follows ``datetime.weekday()`` numbering: 0 is Monday, 6 is
    Sunday. Stats cover the month up to today for the current month and the
    whole month otherwise; the streak is always as of *today*.
    """
    entries = list(entries)
    done = completed_days(entries)
    start, end = month_window(year, month, today)

    weeks: list[list[DayCell | None]] = []
    for week in Calendar(firstweekday=week_start).monthdatescalendar(year, month):
        row: list[DayCell | None] = []
        for d in week:
            if d.month != month:
                row.append(None)
                continue
            row.append(DayCell(
                day=d,
                completed=d in done,
                is_today=d == today,
                is_future=d > today,
            ))
        weeks.append(row)

    labels = WEEKDAY_LABELS[week_start:] + WEEKDAY_LABELS[:week_start]
    return MonthView(
        year=year,
        month=month,
        month_name=month_name[month],
        weekdays=labels,
        weeks=weeks,
        stats=completion_rate(entries, start, end),
        streak=current_streak(entries, today, streak_max_days),
    )


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by *delta* months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
