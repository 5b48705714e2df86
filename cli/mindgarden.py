#!/usr/bin/env python3
"""Mind Garden TUI: habit tracker in the terminal, powered by Textual."""

from __future__ import annotations

import logging
import sys
from datetime import date

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Label, Static

from garden import (
    Habit,
    MonthView,
    active_habits,
    build_month,
    dashboard_stats,
    find_habit,
    habit_summary,
    habits_path,
    load_habits,
    load_profile,
    locked_habits,
    log_file_path,
    log_habit,
    setup_logging,
    shift_month,
    today as _today,
    workspace_root,
)

logger = logging.getLogger("garden.cli")

WEEK_START = {"sun": 6, "mon": 0}


CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $accent;
    margin: 1 0 0 0;
}

#habits-table {
    height: 1fr;
}

#calendar {
    height: auto;
}

#week-chart {
    height: auto;
    color: $text-muted;
}
"""


def render_month(view: MonthView) -> str:
    """Plain-text month grid: ■ completed, · missed, day number for future days."""
    lines = [f"{view.month_name} {view.year}", " ".join(f"{w[:2]:>2}" for w in view.weekdays)]
    for week in view.weeks:
        cells = []
        for cell in week:
            if cell is None:
                cells.append("  ")
            elif cell.completed:
                cells.append(" ■")
            elif cell.is_future:
                cells.append(f"{cell.day.day:>2}")
            else:
                cells.append(" ·")
        lines.append(" ".join(cells))
    lines.append("")
    lines.append(f"🔥 {view.streak} day streak")
    lines.append(f"{view.stats.completed}/{view.stats.total} days · {view.stats.percentage}%")
    return "\n".join(lines)


def selection_row(habit_ids: list[str], selected: str | None) -> int | None:
    """Row to highlight after the table is rebuilt.

    The previously selected habit keeps the cursor; if it is gone the first
    row takes it. None when the table is empty.
    """
    if not habit_ids:
        return None
    if selected in habit_ids:
        return habit_ids.index(selected)
    return 0


# ── Main app ───────────────────────────────────────────────────


class MindGardenApp(App):
    """Mind Garden: track habits and streaks."""

    TITLE = "Mind Garden"
    CSS = CSS

    BINDINGS = [
        Binding("space", "toggle_today", "Toggle today"),
        Binding("[", "prev_month", "Prev month"),
        Binding("]", "next_month", "Next month"),
        Binding("r", "reload", "Reload"),
        Binding("q", "quit", "Quit"),
    ]

    month_offset: reactive[int] = reactive(0)

    def __init__(self) -> None:
        super().__init__()
        self._root = workspace_root()
        self._profile = load_profile(self._root)
        self._habits: list[Habit] = []
        self._selected_id: str | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("Habits", classes="section-title"),
                DataTable(id="habits-table", cursor_type="row"),
                Label("Last 7 days", classes="section-title"),
                Static(id="week-chart"),
                id="left-pane",
            ),
            Vertical(
                Label("Calendar", classes="section-title"),
                Static(id="calendar"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#habits-table", DataTable)
        table.add_columns("", "Habit", "Streak", "Today", "Month")
        self._load_data()

    def _load_data(self) -> None:
        """Reload habits from disk and repopulate every widget."""
        self._habits = active_habits(load_habits(self._root))
        today = _today(self._root)

        table = self.query_one("#habits-table", DataTable)
        table.clear()
        for h in self._habits:
            summary = habit_summary(h, today, self._profile.streak_max_days)
            table.add_row(
                h.icon,
                h.name,
                f"🔥 {summary['streak']}",
                "✅" if summary["completedToday"] else "⬜",
                f"{summary['monthPercentage']}%",
                key=h.id,
            )
        # clear() puts the cursor back on row 0
        ids = [h.id for h in self._habits]
        row = selection_row(ids, self._selected_id)
        self._selected_id = None if row is None else ids[row]
        if row is not None:
            table.move_cursor(row=row)

        stats = dashboard_stats(self._habits, today, self._profile.streak_max_days)
        chart = "  ".join(f"{d['day']} {d['percentage']:>3}%" for d in stats["weeklyProgress"])
        self.query_one("#week-chart", Static).update(chart)

        today_card = stats["today"]
        self.sub_title = f"{today_card['habitsCompleted']}/{today_card['habitsTotal']} today"
        self._refresh_calendar()

    def _selected(self) -> Habit | None:
        for h in self._habits:
            if h.id == self._selected_id:
                return h
        return None

    def _refresh_calendar(self) -> None:
        widget = self.query_one("#calendar", Static)
        habit = self._selected()
        if habit is None:
            widget.update(f"No habits yet. Add them via the web UI or {habits_path(self._root)}")
            return
        today = _today(self._root)
        year, month = shift_month(today.year, today.month, self.month_offset)
        view = build_month(
            habit.logs, year, month, today,
            week_start=WEEK_START[self._profile.week_start],
            streak_max_days=self._profile.streak_max_days,
        )
        widget.update(f"{habit.icon} {habit.name}\n\n{render_month(view)}")

    def watch_month_offset(self, _old: int, _new: int) -> None:
        if self.is_mounted:
            self._refresh_calendar()

    @on(DataTable.RowHighlighted, "#habits-table")
    def _on_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is not None and event.row_key.value is not None:
            self._selected_id = event.row_key.value
            self._refresh_calendar()

    # ── Actions ────────────────────────────────────────────────

    def action_toggle_today(self) -> None:
        if self._selected() is None:
            return
        self._toggle(self._selected_id, _today(self._root))

    @work(thread=True)
    def _toggle(self, habit_id: str, day: date) -> None:
        # re-read under the store lock, the web app may have written since our last load
        try:
            with locked_habits(self._root) as habits:
                habit = find_habit(habits, habit_id)
                entry = log_habit(habit, day) if habit else None
        except OSError as e:
            logger.error("Could not save habits: %s", e)
            self.call_from_thread(self.notify, f"Save failed: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self._load_data)
        if habit is None:
            self.call_from_thread(self.notify, "Habit no longer exists", severity="warning")
            return
        done = entry is not None and entry.completed
        self.call_from_thread(self.notify, f"{habit.name}: {'done' if done else 'not done'} today")

    def action_prev_month(self) -> None:
        self.month_offset -= 1

    def action_next_month(self) -> None:
        self.month_offset += 1

    def action_reload(self) -> None:
        self._profile = load_profile(self._root)
        self._load_data()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set MINDGARDEN_ROOT to your workspace directory.")
        sys.exit(1)

    # stderr output would corrupt the terminal UI
    setup_logging(log_file_path(root), stream=False)

    app = MindGardenApp()
    app.run()


if __name__ == "__main__":
    main()
