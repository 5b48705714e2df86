"""Habit data export as CSV, Markdown or JSON."""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from typing import Any

from garden.models import Habit
from garden.progress import (
    DEFAULT_STREAK_MAX_DAYS,
    InvalidArgumentError,
    completed_days,
    completion_rate,
    current_streak,
    longest_streak,
    trailing_window,
)

EXPORT_FORMATS = {
    "csv": ("text/csv", "csv"),
    "markdown": ("text/markdown", "md"),
    "json": ("application/json", "json"),
}
RATE_WINDOW_DAYS = 30
FILENAME_STEM = "mind-garden-export-habits"


def habit_export_summary(habit: Habit, today: date, max_days: int = DEFAULT_STREAK_MAX_DAYS) -> dict[str, Any]:
    start, end = trailing_window(today, RATE_WINDOW_DAYS)
    rate = completion_rate(habit.logs, start, end)
    return {
        "totalCompletions": len(completed_days(habit.logs)),
        "currentStreak": current_streak(habit.logs, today, max_days),
        "longestStreak": longest_streak(habit.logs),
        "completionRate30d": rate.percentage,
    }


def export_habits(
    habits: list[Habit],
    fmt: str,
    today: date,
    max_days: int = DEFAULT_STREAK_MAX_DAYS,
) -> tuple[str, str, str]:
    """Render *habits* in *fmt*. Returns (content, content_type, filename)."""
    if fmt not in EXPORT_FORMATS:
        raise InvalidArgumentError(
            f"Unknown export format: {fmt!r} (expected one of {', '.join(sorted(EXPORT_FORMATS))})"
        )
    content_type, ext = EXPORT_FORMATS[fmt]
    summaries = [habit_export_summary(h, today, max_days) for h in habits]

    if fmt == "csv":
        content = _to_csv(habits, summaries)
    elif fmt == "markdown":
        content = _to_markdown(habits, summaries, today)
    else:
        content = json.dumps(
            {"habits": [{**h.to_dict(), "summary": s} for h, s in zip(habits, summaries)]},
            indent=2,
            ensure_ascii=False,
        )
    return content, content_type, f"{FILENAME_STEM}.{ext}"


def _to_csv(habits: list[Habit], summaries: list[dict[str, Any]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([
        "Habit", "Icon", "Color", "Created", "Total Completions",
        "Current Streak", "Longest Streak", "30-Day Rate %",
    ])
    for h, s in zip(habits, summaries):
        writer.writerow([
            h.name, h.icon, h.color, h.created_at, s["totalCompletions"],
            s["currentStreak"], s["longestStreak"], s["completionRate30d"],
        ])

    buf.write("\n# Habit Completion Log\n")
    writer.writerow(["Habit", "Date", "Completed", "Note"])
    for h in habits:
        for entry in sorted(h.logs, key=lambda e: e.date, reverse=True):
            writer.writerow([h.name, entry.date.isoformat(), str(entry.completed).lower(), entry.note or ""])
    return buf.getvalue()


def _to_markdown(habits: list[Habit], summaries: list[dict[str, Any]], today: date) -> str:
    lines = [
        "# Mind Garden Export",
        f"*Exported on {today.strftime('%A, %B')} {today.day}, {today.year}*",
        "",
        "---",
        "",
        "## 🎯 Habits",
        "",
    ]
    if not habits:
        lines.append("*No habits*")
    for h, s in zip(habits, summaries):
        title = f"### {h.icon} {h.name}"
        if h.is_archived:
            title += " *(archived)*"
        lines.append(title)
        if h.description:
            lines.append(f"*{h.description}*")
        lines.append(f"- 🔥 **Current Streak:** {s['currentStreak']} days")
        lines.append(f"- 🏆 **Longest Streak:** {s['longestStreak']} days")
        lines.append(f"- ✅ **Total Completions:** {s['totalCompletions']}")
        lines.append(f"- 📈 **Last 30 Days:** {s['completionRate30d']}%")
        lines.append("")
    return "\n".join(lines)
