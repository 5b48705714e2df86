"""Shared test fixtures for Mind Garden tests."""

from __future__ import annotations

import json
import os
from datetime import date
from pathlib import Path

import pytest
import yaml

TODAY = date(2024, 3, 15)


def _days(*iso: str) -> list[dict]:
    return [{"date": d, "completed": True} for d in iso]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a profile and four habits."""
    root = tmp_path / "workspace"
    (root / "garden").mkdir(parents=True)

    profile = {
        "timezone": "UTC",
        "streak_max_days": 365,
        "log_window_days": 60,
        "week_start": "sun",
    }
    (root / "garden" / "profile.yaml").write_text(
        yaml.dump(profile, default_flow_style=False), encoding="utf-8"
    )

    habits = {
        "habits": [
            {
                "id": "read",
                "name": "Read",
                "icon": "📚",
                "color": "#3b82f6",
                "createdAt": "2024-01-01",
                # done through yesterday, not yet today
                "logs": _days("2024-03-10", "2024-03-11", "2024-03-12", "2024-03-13", "2024-03-14"),
            },
            {
                "id": "run",
                "name": "Run",
                "icon": "🏃",
                "color": "#ef4444",
                "createdAt": "2024-02-01",
                "reminderEnabled": True,
                "reminderTime": "07:00",
                "logs": _days("2024-03-13", "2024-03-14", "2024-03-15"),
            },
            {
                "id": "water",
                "name": "Drink water",
                "icon": "💧",
                "color": "#06b6d4",
                "createdAt": "2024-02-15",
                "reminderEnabled": True,
                "reminderTime": "07:00",
                "logs": [
                    {"date": "2024-03-12", "completed": True},
                    {"date": "2024-03-14", "completed": False, "note": "sick"},
                ],
            },
            {
                "id": "meditate",
                "name": "Meditate",
                "icon": "🧘",
                "color": "#a855f7",
                "isArchived": True,
                "createdAt": "2023-12-01",
                "logs": _days("2024-03-14", "2024-03-15"),
            },
        ]
    }
    (root / "garden" / "habits.json").write_text(
        json.dumps(habits, indent=2, ensure_ascii=False), encoding="utf-8"
    )

    os.environ["MINDGARDEN_ROOT"] = str(root)
    yield root
    if "MINDGARDEN_ROOT" in os.environ:
        del os.environ["MINDGARDEN_ROOT"]
