"""Filesystem helpers for publishing staged session directories."""

from __future__ import annotations

import os
import shutil
import time
from pathlib import Path


def fsync_file(path: Path) -> None:
    # On Windows, os.fsync on a read-only handle can raise EBADF.
    mode = "r+b" if os.name == "nt" else "rb"
    try:
        with path.open(mode) as handle:
            os.fsync(handle.fileno())
    except FileNotFoundError:
        return
    except OSError as exc:
        if os.name == "nt" and getattr(exc, "errno", None) in (9, 22, 13):
            return
        raise


def fsync_dir(path: Path) -> None:
    if os.name == "nt":
        return
    fd = os.open(str(path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def fsync_tree(root: Path) -> None:
    for path in sorted(root.rglob("*")):
        if path.is_file():
            fsync_file(path)
    fsync_dir(root)


def publish_directory(staging: Path, destination: Path) -> None:
    """Atomically move a fully written staging directory into place."""

    if destination.exists():
        raise FileExistsError(f"Destination already exists: {destination}")
    fsync_tree(staging)
    os.replace(staging, destination)
    fsync_dir(destination.parent)


def discard_directory(path: Path, retries: int = 5, backoff_s: float = 0.05) -> None:
    for attempt in range(retries):
        try:
            shutil.rmtree(path)
            return
        except FileNotFoundError:
            return
        except PermissionError:
            if attempt == retries - 1:
                raise
            time.sleep(backoff_s * (2**attempt))
