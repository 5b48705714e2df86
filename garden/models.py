"""Typed dataclasses for the Mind Garden data model.

All persisted models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)


# ── Habits ────────────────────────────────────────────────────


@dataclass
class HabitLogEntry:
    """One calendar-day record for one habit."""

    date: date
    completed: bool = True
    note: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitLogEntry:
        raw = d.get("date", "")
        day = raw if isinstance(raw, date) else date.fromisoformat(str(raw)[:10])
        note = d.get("note")
        return cls(
            date=day,
            completed=bool(d.get("completed", True)),
            note=str(note) if note else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"date": self.date.isoformat(), "completed": self.completed}
        if self.note:
            d["note"] = self.note
        return d


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    icon: str = "✨"
    color: str = "#10b981"
    description: str = ""
    frequency: str = "daily"
    target_days: list[str] = field(default_factory=list)
    reminder_enabled: bool = False
    reminder_time: str | None = None  # HH:MM
    is_archived: bool = False
    created_at: str = ""  # ISO date
    logs: list[HabitLogEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            icon=str(d.get("icon") or "✨"),
            color=str(d.get("color") or "#10b981"),
            description=str(d.get("description") or ""),
            frequency=str(d.get("frequency") or "daily"),
            target_days=[str(x) for x in (d.get("targetDays") or [])],
            reminder_enabled=bool(d.get("reminderEnabled", False)),
            reminder_time=d.get("reminderTime") or None,
            is_archived=bool(d.get("isArchived", False)),
            created_at=str(d.get("createdAt", "")),
            logs=[HabitLogEntry.from_dict(e) for e in (d.get("logs") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "description": self.description,
            "frequency": self.frequency,
            "targetDays": self.target_days,
            "reminderEnabled": self.reminder_enabled,
            "reminderTime": self.reminder_time,
            "isArchived": self.is_archived,
            "createdAt": self.created_at,
            "logs": [e.to_dict() for e in sorted(self.logs, key=lambda e: e.date, reverse=True)],
        }

    def entry_for(self, day: date) -> HabitLogEntry | None:
        for entry in self.logs:
            if entry.date == day:
                return entry
        return None


# ── Engine results ────────────────────────────────────────────


@dataclass
class CompletionRate:
    completed: int = 0
    total: int = 0
    percentage: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"completed": self.completed, "total": self.total, "percentage": self.percentage}


@dataclass
class HabitStreak:
    id: str = ""
    streak: int = 0
    name: str = ""
    icon: str = ""
    color: str = ""
    completed_today: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "streak": self.streak,
            "completedToday": self.completed_today,
        }


@dataclass
class Ranking:
    habits: list[HabitStreak] = field(default_factory=list)
    best: HabitStreak | None = None


# ── Reminders ─────────────────────────────────────────────────


@dataclass
class Reminder:
    id: str = ""  # "{habit_id}-{YYYY-MM-DD}"
    habit_id: str = ""
    title: str = ""
    message: str = ""
    icon: str = ""
    color: str = ""
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "reminder",
            "habitId": self.habit_id,
            "title": self.title,
            "message": self.message,
            "habitIcon": self.icon,
            "habitColor": self.color,
            "timestamp": self.timestamp,
        }


# ── Profile ───────────────────────────────────────────────────


def _positive_int(d: dict[str, Any], key: str, default: int) -> int:
    value = d.get(key, default)
    # bool is an int subclass
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    logger.warning("Invalid %s %r in profile, using %d", key, value, default)
    return default


@dataclass
class Profile:
    timezone: str = "UTC"
    streak_max_days: int = 365
    log_window_days: int = 60
    week_start: str = "sun"  # sun, mon

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Profile:
        if not d or not isinstance(d, dict):
            return cls()
        week_start = str(d.get("week_start", "sun")).lower()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            streak_max_days=_positive_int(d, "streak_max_days", 365),
            log_window_days=_positive_int(d, "log_window_days", 60),
            week_start=week_start if week_start in {"sun", "mon"} else "sun",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "streak_max_days": self.streak_max_days,
            "log_window_days": self.log_window_days,
            "week_start": self.week_start,
        }
