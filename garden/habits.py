"""Habit storage, validation, CRUD and completion logging for Mind Garden."""

from __future__ import annotations

import logging
import re
import secrets
from contextlib import contextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Iterator

from garden.fileio import exclusive_lock, read_json, write_json_atomic
from garden.models import Habit, HabitLogEntry
from garden.workspace import habits_path

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────


VALID_FREQUENCIES = {"daily", "weekly", "custom"}
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def validate_habit(data: dict[str, Any], partial: bool = False) -> list[str]:
    """Validate habit fields and return list of errors (empty if valid).

    With *partial* set only the keys present are checked, for PATCH-style updates.
    """
    errors = []
    if "name" in data or not partial:
        if not str(data.get("name") or "").strip():
            errors.append("Habit name is required")

    reminder = data.get("reminderTime")
    if reminder and not _TIME_RE.match(str(reminder)):
        errors.append(f"Invalid reminderTime: {reminder!r} (expected HH:MM)")

    color = data.get("color")
    if color and not _COLOR_RE.match(str(color)):
        errors.append(f"Invalid color: {color!r} (expected #rrggbb)")

    frequency = data.get("frequency")
    if frequency and frequency not in VALID_FREQUENCIES:
        errors.append(f"Invalid frequency: {frequency}")

    target_days = data.get("targetDays")
    if target_days is not None and not isinstance(target_days, list):
        errors.append("targetDays must be a list")

    for flag in ("isArchived", "reminderEnabled"):
        if flag in data and not isinstance(data[flag], bool):
            errors.append(f"{flag} must be true or false")

    return errors


# ── Storage ───────────────────────────────────────────────────


def load_habits(root: Path | None = None) -> list[Habit]:
    """Load habits.json into Habit models."""
    data = read_json(habits_path(root))
    return [Habit.from_dict(h) for h in (data.get("habits") or [])]


def save_habits(habits: list[Habit], root: Path | None = None) -> None:
    """Save habits back to habits.json atomically."""
    write_json_atomic(habits_path(root), {"habits": [h.to_dict() for h in habits]})


@contextmanager
def locked_habits(root: Path | None = None) -> Iterator[list[Habit]]:
    """Load habits under the store lock and save them when the block exits.

    The load, mutate and save cycle runs under one exclusive lock, so request
    threads, the TUI and other processes apply their changes one after
    another. Nothing is saved if the block raises.
    """
    with exclusive_lock(habits_path(root)):
        habits = load_habits(root)
        yield habits
        save_habits(habits, root)


# ── CRUD ──────────────────────────────────────────────────────


def find_habit(habits: list[Habit], habit_id: str) -> Habit | None:
    for h in habits:
        if h.id == habit_id:
            return h
    return None


def active_habits(habits: list[Habit]) -> list[Habit]:
    """Habits that take part in stats and reminders (not archived)."""
    return [h for h in habits if not h.is_archived]


def create_habit(habits: list[Habit], data: dict[str, Any], today: date) -> tuple[Habit, list[str]]:
    """Create and add a new habit. Returns (habit, errors)."""
    errors = validate_habit(data)
    if errors:
        return Habit(), errors

    habit = Habit.from_dict({**data, "logs": []})
    habit.name = habit.name.strip()
    habit.id = str(data.get("id") or secrets.token_hex(8))
    if find_habit(habits, habit.id):
        return Habit(), [f"Habit ID already exists: {habit.id}"]
    habit.created_at = today.isoformat()
    habits.append(habit)
    logger.info("Created habit %s (%s)", habit.id, habit.name)
    return habit, []


UPDATABLE_FIELDS = {
    "name", "icon", "color", "description", "frequency", "targetDays",
    "isArchived", "reminderEnabled", "reminderTime",
}


def update_habit(habits: list[Habit], habit_id: str, updates: dict[str, Any]) -> tuple[Habit | None, list[str]]:
    """Apply a partial update. Unknown keys are ignored. Returns (habit, errors)."""
    habit = find_habit(habits, habit_id)
    if not habit:
        return None, [f"Habit not found: {habit_id}"]

    updates = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
    errors = validate_habit(updates, partial=True)
    if errors:
        return None, errors

    merged = habit.to_dict()
    merged.update(updates)
    updated = Habit.from_dict(merged)
    updated.logs = habit.logs
    for i, h in enumerate(habits):
        if h.id == habit_id:
            habits[i] = updated
            break
    return updated, []


def delete_habit(habits: list[Habit], habit_id: str) -> bool:
    """Remove a habit together with all of its log entries."""
    for i, h in enumerate(habits):
        if h.id == habit_id:
            removed = habits.pop(i)
            logger.info("Deleted habit %s with %d log entries", habit_id, len(removed.logs))
            return True
    return False


# ── Completion log ────────────────────────────────────────────


def log_habit(
    habit: Habit,
    day: date,
    completed: bool | None = None,
    note: str | None = None,
) -> HabitLogEntry | None:
    """Toggle or set completion of *habit* on *day*.

    An entry that would say "not completed" without a note carries no more
    information than a missing entry, so it is removed instead of stored; the
    return value is then None. Without an explicit *completed* an existing
    entry flips and a new one is created as completed.
    """
    existing = habit.entry_for(day)

    if existing is not None:
        if completed is False and not note:
            habit.logs.remove(existing)
            logger.debug("Habit %s: cleared %s", habit.id, day.isoformat())
            return None
        existing.completed = (not existing.completed) if completed is None else completed
        if note is not None:
            existing.note = note or None
        if not existing.completed and not existing.note:
            habit.logs.remove(existing)
            return None
        return existing

    new_completed = True if completed is None else completed
    if not new_completed and not note:
        return None
    entry = HabitLogEntry(date=day, completed=new_completed, note=note or None)
    habit.logs.append(entry)
    logger.debug("Habit %s: logged %s completed=%s", habit.id, day.isoformat(), new_completed)
    return entry


def windowed_logs(habit: Habit, reference: date, days: int) -> list[HabitLogEntry]:
    """Entries from the last *days* days up to *reference*, newest first."""
    cutoff = reference - timedelta(days=days)
    recent = [e for e in habit.logs if cutoff <= e.date <= reference]
    return sorted(recent, key=lambda e: e.date, reverse=True)
