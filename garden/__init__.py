"""Mind Garden core library: habit progress engine and habit service.

Public API re-exports for convenient imports:
    from garden import current_streak, completion_rate, load_habits, ...
"""

# Progress engine
from garden.progress import (
    DEFAULT_STREAK_MAX_DAYS,
    InvalidArgumentError,
    to_day,
    completed_days,
    is_completed_on,
    current_streak,
    longest_streak,
    round_percentage,
    completion_rate,
    trailing_window,
    month_window,
    rank_by_streak,
)

# Workspace & config
from garden.workspace import (
    workspace_root,
    profile_path,
    habits_path,
    log_file_path,
    load_profile,
    save_profile,
    get_user_timezone,
    now_local,
    today,
)

# File I/O
from garden.fileio import (
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
    exclusive_lock,
)

# Habits
from garden.habits import (
    validate_habit,
    load_habits,
    save_habits,
    locked_habits,
    find_habit,
    active_habits,
    create_habit,
    update_habit,
    delete_habit,
    log_habit,
    windowed_logs,
)

# Views
from garden.calendar_view import DayCell, MonthView, build_month, shift_month
from garden.stats import dashboard_stats, habit_summary, habit_streak
from garden.export import export_habits, habit_export_summary
from garden.reminders import due_reminders, format_time, prune_shown, reminder_id

# Logging
from garden.log import setup_logging

# Models
from garden.models import (
    HabitLogEntry,
    Habit,
    CompletionRate,
    HabitStreak,
    Ranking,
    Reminder,
    Profile,
)
