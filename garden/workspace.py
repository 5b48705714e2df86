"""Workspace root, profile config, timezone and path helpers for Mind Garden."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from garden.fileio import read_yaml, write_yaml_atomic
from garden.models import Profile

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains garden/)."""
    return Path(
        os.environ.get("MINDGARDEN_ROOT", str(Path.home() / "mindgarden"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "garden" / "profile.yaml"


def habits_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "garden" / "habits.json"


def log_file_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "garden" / "logs" / "mindgarden.log"


# ── Profile ───────────────────────────────────────────────────

def load_profile(root: Path | None = None) -> Profile:
    return Profile.from_dict(read_yaml(profile_path(root)))


def save_profile(profile: Profile, root: Path | None = None) -> None:
    write_yaml_atomic(profile_path(root), profile.to_dict())


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone that defines calendar-day boundaries, defaulting to UTC."""
    name = load_profile(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in profile, falling back to UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Current datetime in the workspace timezone."""
    return datetime.now(get_user_timezone(root))


def today(root: Path | None = None) -> date:
    """Today's calendar day in the workspace timezone."""
    return now_local(root).date()
