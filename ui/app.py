from __future__ import annotations

import logging
import os
import secrets
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncIterator

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from garden import (
    InvalidArgumentError,
    active_habits,
    build_month,
    create_habit,
    dashboard_stats,
    delete_habit,
    due_reminders,
    export_habits,
    find_habit,
    get_user_timezone,
    habit_summary,
    load_habits,
    load_profile,
    locked_habits,
    log_file_path,
    log_habit,
    now_local,
    prune_shown,
    setup_logging,
    to_day,
    update_habit,
    windowed_logs,
    workspace_root as _workspace_root,
)

logger = logging.getLogger("garden.ui")

WEEK_START = {"sun": 6, "mon": 0}


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


# ── App & auth ────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(log_file_path(_workspace_root()))
    yield


app = FastAPI(title="Mind Garden", version="0.1.0", lifespan=lifespan)

security = HTTPBasic(auto_error=False)

# Reminder ids already delivered by this process.
_shown_reminders: set[str] = set()


@app.exception_handler(InvalidArgumentError)
async def _invalid_argument(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("MINDGARDEN_USERNAME", "")
    expected_password = os.environ.get("MINDGARDEN_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _today() -> date:
    # One clock read per request; everything below takes this date.
    return now_local(_workspace_root()).date()


def _habit_or_404(habits: list, habit_id: str):
    habit = find_habit(habits, habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(username: str = Depends(get_current_user)) -> HTMLResponse:
    root = _workspace_root()
    profile = load_profile(root)
    today = _today()
    stats = dashboard_stats(load_habits(root), today, profile.streak_max_days)

    rows = []
    for h in stats["streaks"]["habits"]:
        check = "✅" if h["completedToday"] else "⬜"
        rows.append(
            f'<tr><td>{_escape(h["icon"])}</td><td>{_escape(h["name"])}</td>'
            f'<td>\U0001f525 {h["streak"]}</td><td>{check}</td></tr>'
        )

    best = stats["streaks"]["best"]
    best_txt = f'{_escape(best["icon"])} {_escape(best["name"])} · {best["streak"]} days' if best else "(no streak yet)"
    chart = " ".join(f'{d["day"]} {d["percentage"]}%' for d in stats["weeklyProgress"])
    today_card = stats["today"]

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Mind Garden</title>
</head>
<body>
  <header>
    <h1>Mind Garden</h1>
    <div class="muted small">{today.isoformat()} · {today_card["habitsCompleted"]}/{today_card["habitsTotal"]} done today ({today_card["percentage"]}%)</div>
  </header>
  <section>
    <h2>Best streak</h2>
    <div>{best_txt}</div>
  </section>
  <section>
    <h2>Habits</h2>
    {'<table>' + ''.join(rows) + '</table>' if rows else '<div class="muted">No habits yet. POST /api/habits to add one.</div>'}
  </section>
  <section>
    <h2>This week</h2>
    <pre>{_escape(chart)}</pre>
  </section>
</body>
</html>"""
    return HTMLResponse(html)


# ── Habits ────────────────────────────────────────────────────

@app.get("/api/habits")
def api_list_habits(archived: bool = False, username: str = Depends(get_current_user)) -> list[dict[str, Any]]:
    """List habits with recent logs and computed streak fields.

    Logs are windowed to ``log_window_days``; the streak is computed from the
    full history.
    """
    root = _workspace_root()
    profile = load_profile(root)
    today = _today()
    habits = load_habits(root)
    if not archived:
        habits = active_habits(habits)

    result = []
    for h in habits:
        d = h.to_dict()
        d["logs"] = [e.to_dict() for e in windowed_logs(h, today, profile.log_window_days)]
        d.update(habit_summary(h, today, profile.streak_max_days))
        result.append(d)
    return result


@app.post("/api/habits", status_code=201)
def api_create_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    with locked_habits(_workspace_root()) as habits:
        habit, errors = create_habit(habits, payload, _today())
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
    return habit.to_dict()


@app.get("/api/habits/{habit_id}")
def api_get_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    profile = load_profile(root)
    habit = _habit_or_404(load_habits(root), habit_id)
    d = habit.to_dict()
    d.update(habit_summary(habit, _today(), profile.streak_max_days))
    return d


@app.patch("/api/habits/{habit_id}")
def api_update_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    with locked_habits(_workspace_root()) as habits:
        _habit_or_404(habits, habit_id)
        updated, errors = update_habit(habits, habit_id, payload)
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
    return updated.to_dict()


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    with locked_habits(_workspace_root()) as habits:
        if not delete_habit(habits, habit_id):
            raise HTTPException(status_code=404, detail="Habit not found")
    return {"success": True}


@app.post("/api/habits/{habit_id}/log")
def api_log_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Toggle or set completion for a day. Returns the entry or {"deleted": true}."""
    root = _workspace_root()
    raw_date = payload.get("date")
    if not raw_date:
        raise HTTPException(status_code=400, detail="Date is required")
    day = to_day(raw_date, get_user_timezone(root))

    completed = payload.get("completed")
    if completed is not None and not isinstance(completed, bool):
        raise HTTPException(status_code=400, detail="completed must be a boolean")
    note = payload.get("note")

    with locked_habits(root) as habits:
        habit = _habit_or_404(habits, habit_id)
        entry = log_habit(habit, day, completed=completed, note=note)
    return entry.to_dict() if entry else {"deleted": True}


@app.get("/api/habits/{habit_id}/calendar")
def api_habit_calendar(
    habit_id: str,
    year: int | None = None,
    month: int | None = None,
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    root = _workspace_root()
    profile = load_profile(root)
    habit = _habit_or_404(load_habits(root), habit_id)
    today = _today()
    view = build_month(
        habit.logs,
        today.year if year is None else year,
        today.month if month is None else month,
        today,
        week_start=WEEK_START[profile.week_start],
        streak_max_days=profile.streak_max_days,
    )
    return {"habitId": habit.id, **view.to_dict()}


# ── Dashboard, export, reminders ──────────────────────────────

@app.get("/api/dashboard/stats")
def api_dashboard_stats(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    profile = load_profile(root)
    return dashboard_stats(load_habits(root), _today(), profile.streak_max_days)


@app.get("/api/export")
def api_export(format: str = "json", username: str = Depends(get_current_user)) -> Response:
    root = _workspace_root()
    profile = load_profile(root)
    content, content_type, filename = export_habits(
        load_habits(root), format, _today(), profile.streak_max_days
    )
    logger.info("Exported habits as %s", format)
    return Response(
        content=content,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/reminders/due")
def api_due_reminders(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    now = now_local(root)
    prune_shown(_shown_reminders, now)
    due = due_reminders(load_habits(root), now, _shown_reminders)
    _shown_reminders.update(r.id for r in due)
    return {"reminders": [r.to_dict() for r in due]}
