"""Dataset root layout and session naming helpers."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

SESSIONS_DIRNAME = "sessions"
STAGING_SUFFIX = ".tmp"


def default_session_name(now: dt.datetime | None = None, run_id: int = 1) -> str:
    now = now or dt.datetime.now()
    return f"{now:%Y%m%d_%H%M%S}_run{run_id:03d}"


def ensure_dataset_root(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(f"dataset root does not exist: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"dataset root is not a directory: {path}")
    return path


def sessions_dir(dataset_root: Path) -> Path:
    return dataset_root / SESSIONS_DIRNAME


def session_dir(dataset_root: Path, session_name: str) -> Path:
    return sessions_dir(dataset_root) / session_name


def staging_dir(dataset_root: Path, session_name: str) -> Path:
    return sessions_dir(dataset_root) / f"{session_name}{STAGING_SUFFIX}"


def is_staging_dir(path: Path) -> bool:
    return path.name.endswith(STAGING_SUFFIX)


def validate_session_name(name: str) -> str:
    if not name or name.strip() != name:
        raise ValueError("session name must be non-empty without surrounding whitespace")
    if any(sep in name for sep in ("/", "\\")) or name in (".", ".."):
        raise ValueError(f"session name must not contain path separators: {name!r}")
    if name.endswith(STAGING_SUFFIX):
        raise ValueError(f"session name must not end with {STAGING_SUFFIX!r}")
    return name
