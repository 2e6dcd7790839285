"""Zip packaging of finished sessions."""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path
from typing import Sequence

from .logging_utils import get_logger
from .paths import is_staging_dir, sessions_dir


def list_sessions(dataset_root: Path) -> list[Path]:
    root = sessions_dir(dataset_root)
    if not root.exists():
        return []
    return sorted(
        path for path in root.iterdir() if path.is_dir() and not is_staging_dir(path)
    )


def _resolve_targets(dataset_root: Path, session_names: Sequence[str]) -> list[Path]:
    if not session_names:
        return list_sessions(dataset_root)
    root = sessions_dir(dataset_root)
    return [root / name for name in session_names if (root / name).is_dir()]


def _collect_files(targets: Sequence[Path]) -> list[Path]:
    files: list[Path] = []
    for target in targets:
        for path in target.rglob("*"):
            if any(is_staging_dir(parent) for parent in path.relative_to(target).parents):
                continue
            if path.is_file():
                files.append(path)
    return sorted(files)


def package_sessions(
    dataset_root: Path,
    output_zip: Path,
    *,
    session_names: Sequence[str] = (),
    delete_after: bool = False,
) -> Path:
    log = get_logger("packaging")
    targets = _resolve_targets(dataset_root, session_names)
    if not targets:
        raise FileNotFoundError("no sessions found to package")

    files = _collect_files(targets)
    output_zip.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(output_zip, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in files:
            zf.write(path, path.relative_to(dataset_root).as_posix())
    log.info(
        "Packaged {} sessions ({} files, {} bytes) into {}",
        len(targets),
        len(files),
        sum(path.stat().st_size for path in files),
        output_zip,
    )

    if delete_after:
        for target in targets:
            shutil.rmtree(target)
        log.info("Deleted {} packaged sessions", len(targets))
    return output_zip
