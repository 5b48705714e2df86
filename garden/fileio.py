"""File I/O for the Mind Garden workspace: tolerant readers, atomic writers, store lock."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

import yaml


def _read_mapping(path: Path, parse: Callable[[str], Any]) -> dict[str, Any]:
    # missing, blank and non-mapping files all read as {}
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    data = parse(text)
    return data if isinstance(data, dict) else {}


def read_json(path: Path) -> dict[str, Any]:
    return _read_mapping(path, json.loads)


def read_yaml(path: Path) -> dict[str, Any]:
    return _read_mapping(path, yaml.safe_load)


def _replace_atomic(path: Path, content: str) -> None:
    """Write *content* to a temp file beside *path*, then rename it over *path*.

    Readers see either the old file or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    _replace_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    _replace_atomic(path, yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False))


def lock_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextmanager
def exclusive_lock(path: Path) -> Iterator[None]:
    """Hold ``flock(LOCK_EX)`` on ``<path>.lock`` for the duration of the block.

    The lock lives on a sibling file because *path* itself is replaced by
    rename on every write. Each entry opens its own descriptor, so the lock
    excludes other threads of this process as well as other processes.
    """
    target = lock_path_for(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "a", encoding="utf-8") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
