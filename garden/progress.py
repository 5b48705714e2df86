"""Habit progress engine for Mind Garden.

Pure functions over a habit's log entries: day membership, current streak,
completion rate over a window and streak ranking. Nothing here reads a clock
or touches the filesystem; callers pass the reference date in.

Day convention: a calendar day is a ``datetime.date`` in the workspace
timezone (UTC unless profile.yaml says otherwise). Raw timestamps are turned
into days exactly once, by ``to_day``, before they reach the engine.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Sequence

from garden.models import CompletionRate, HabitStreak, Ranking

DEFAULT_STREAK_MAX_DAYS = 365


class InvalidArgumentError(ValueError):
    """Raised when a caller hands the engine a malformed argument."""


# ── Day normalization ─────────────────────────────────────────


def to_day(value: Any, tz: tzinfo | None = None) -> date:
    """Normalize a date-like value to a calendar day in *tz* (default UTC).

    Accepts a ``date``, an aware or naive ``datetime`` (naive means UTC), or an
    ISO-8601 string holding either. Datetimes are converted to *tz* before the
    time-of-day is dropped.
    """
    tz = tz or timezone.utc
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidArgumentError("Empty date string")
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                raise InvalidArgumentError(f"Invalid date: {value!r}")
        try:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidArgumentError(f"Invalid date: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(tz).date()
    if isinstance(value, date):
        return value
    raise InvalidArgumentError(f"Not a date: {value!r}")


def _require_day(value: Any, name: str) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime) or not isinstance(value, date):
        raise InvalidArgumentError(f"{name} must be a calendar date, got {value!r}")
    return value


# ── Entry set ─────────────────────────────────────────────────


def completed_days(entries: Iterable[Any]) -> frozenset[date]:
    """Return the set of days with a completed entry.

    Entries are anything with ``date`` and ``completed`` attributes. Two
    entries on the same day break the one-entry-per-day invariant and are
    rejected.
    """
    seen: set[date] = set()
    done: set[date] = set()
    for entry in entries:
        day = _require_day(entry.date, "entry.date")
        if day in seen:
            raise InvalidArgumentError(f"Duplicate log entry for {day.isoformat()}")
        seen.add(day)
        if entry.completed:
            done.add(day)
    return frozenset(done)


def is_completed_on(entries: Iterable[Any], day: date) -> bool:
    """True iff there is a completed entry for *day*."""
    day = _require_day(day, "day")
    return day in completed_days(entries)


# ── Streaks ───────────────────────────────────────────────────


def current_streak(
    entries: Iterable[Any],
    reference: date,
    max_days: int = DEFAULT_STREAK_MAX_DAYS,
) -> int:
    """Count consecutive completed days walking back from *reference*.

    An incomplete *reference* day is skipped rather than breaking the run, so
    a habit done every day through yesterday keeps its streak until the day
    is over. Any other gap ends the walk. At most *max_days* days are
    examined; if the caller supplied a truncated window of entries the result
    is a lower bound.
    """
    reference = _require_day(reference, "reference")
    if max_days < 1:
        raise InvalidArgumentError(f"max_days must be >= 1, got {max_days}")
    done = completed_days(entries)
    if not done:
        return 0

    streak = 0
    for i in range(max_days):
        if reference - timedelta(days=i) in done:
            streak += 1
        elif i == 0:
            continue
        else:
            break
    return streak


def longest_streak(entries: Iterable[Any]) -> int:
    """Longest run of consecutive completed days anywhere in the history."""
    done = sorted(completed_days(entries))
    best = run = 0
    prev: date | None = None
    for day in done:
        run = run + 1 if prev is not None and (day - prev).days == 1 else 1
        best = max(best, run)
        prev = day
    return best


# ── Completion rate ───────────────────────────────────────────


def round_percentage(part: int, whole: int) -> int:
    """``part / whole`` as a percentage, rounded half up; 0 when *whole* is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def completion_rate(entries: Iterable[Any], start: date, end: date) -> CompletionRate:
    """Completed days over the inclusive window ``[start, end]``."""
    start = _require_day(start, "start")
    end = _require_day(end, "end")
    if start > end:
        raise InvalidArgumentError(
            f"Window start {start.isoformat()} is after end {end.isoformat()}"
        )
    done = completed_days(entries)
    total = (end - start).days + 1
    completed = sum(1 for day in done if start <= day <= end)
    return CompletionRate(
        completed=completed,
        total=total,
        percentage=round_percentage(completed, total),
    )


# ── Windows ───────────────────────────────────────────────────


def trailing_window(reference: date, days: int = 7) -> tuple[date, date]:
    """The *days*-day window ending on *reference*, inclusive."""
    reference = _require_day(reference, "reference")
    if days < 1:
        raise InvalidArgumentError(f"days must be >= 1, got {days}")
    return reference - timedelta(days=days - 1), reference


def month_window(year: int, month: int, today: date) -> tuple[date, date]:
    """Window used for "this month" stats.

    The current month runs up to *today*; past months and future months span
    the whole month.
    """
    today = _require_day(today, "today")
    if not 1 <= month <= 12:
        raise InvalidArgumentError(f"month must be 1-12, got {month}")
    if not date.min.year <= year <= date.max.year:
        raise InvalidArgumentError(f"year must be {date.min.year}-{date.max.year}, got {year}")
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    if first <= today <= last:
        return first, today
    return first, last


# ── Ranking ───────────────────────────────────────────────────


def rank_by_streak(
    habits: Sequence[HabitStreak],
    include_zero: bool = False,
) -> Ranking:
    """Sort habits by streak, best first, keeping input order on ties.

    ``best`` is the first habit, or None when there are no habits or nobody
    has a streak (unless *include_zero* is set).
    """
    ranked = sorted(habits, key=lambda h: h.streak, reverse=True)
    best = None
    if ranked and (ranked[0].streak > 0 or include_zero):
        best = ranked[0]
    return Ranking(habits=ranked, best=best)
