"""Persist assembled sessions under the dataset root."""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import AppConfig
from ..errors import SessionWriteError
from ..fs_utils import discard_directory, publish_directory
from ..logging_utils import get_logger
from ..paths import ensure_dataset_root, session_dir, staging_dir, validate_session_name
from ..session.assembler import Session
from .ffmpeg import FfmpegSettings, FfmpegWriter, find_ffmpeg
from .jsonl import JsonlWriter

ACTIONS_FILE = "actions.jsonl"
COMPILED_FILE = "compiled_actions.txt"
THOUGHTS_FILE = "thoughts.txt"
EVENTS_FILE = "events.jsonl"
OPTIONS_FILE = "options.json"
META_FILE = "meta.json"
DIAGNOSTICS_FILE = "diagnostics.json"
VIDEO_FILE = "video.mp4"
RAW_FRAME_FILE = "frame.bgra"


class SessionMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_name: str
    created_at_utc: dt.datetime
    mode: str = Field("dry_run")
    step_count: int
    step_duration: int
    long_goal: str = ""
    mid_goal: str = ""


@dataclass(frozen=True, slots=True)
class SessionLayout:
    root_dir: Path
    frame_path: Optional[Path] = None

    @property
    def actions_path(self) -> Path:
        return self.root_dir / ACTIONS_FILE

    @property
    def compiled_path(self) -> Path:
        return self.root_dir / COMPILED_FILE

    @property
    def thoughts_path(self) -> Path:
        return self.root_dir / THOUGHTS_FILE

    @property
    def events_path(self) -> Path:
        return self.root_dir / EVENTS_FILE


class SessionWriter:
    """Write a session into ``<root>/sessions/<name>.tmp`` and publish it on success."""

    def __init__(
        self,
        config: AppConfig,
        *,
        dataset_root: Path | None = None,
        ffmpeg_factory: Callable[[FfmpegSettings], FfmpegWriter] = FfmpegWriter,
    ) -> None:
        self._config = config
        self._dataset_root = Path(dataset_root or config.dataset_root)
        self._ffmpeg_factory = ffmpeg_factory
        self._log = get_logger("writer.session")

    def write(
        self,
        session: Session,
        *,
        session_name: str,
        long_goal: str = "",
        mid_goal: str = "",
        created_at: dt.datetime | None = None,
    ) -> SessionLayout:
        ensure_dataset_root(self._dataset_root)
        validate_session_name(session_name)
        final_dir = session_dir(self._dataset_root, session_name)
        if final_dir.exists():
            raise SessionWriteError(f"session already exists: {final_dir}")
        staging = staging_dir(self._dataset_root, session_name)
        if staging.exists():
            self._log.warning("Removing stale staging directory {}", staging)
            discard_directory(staging)
        staging.mkdir(parents=True)

        meta = SessionMeta(
            session_name=session_name,
            created_at_utc=created_at or dt.datetime.now(dt.timezone.utc),
            step_count=session.step_count,
            step_duration=session.step_duration,
            long_goal=long_goal,
            mid_goal=mid_goal,
        )
        try:
            self._write_json(staging / OPTIONS_FILE, self._options_payload(session))
            self._write_json(staging / META_FILE, meta.model_dump(mode="json"))
            self._write_steps(staging, session)
            self._write_json(staging / DIAGNOSTICS_FILE, session.diagnostics.to_payload())
            frame_name = self._write_frame(staging, session)
            publish_directory(staging, final_dir)
        except BaseException:
            discard_directory(staging)
            raise

        self._log.info("Session {} written to {}", session_name, final_dir)
        return SessionLayout(
            root_dir=final_dir,
            frame_path=final_dir / frame_name if frame_name else None,
        )

    def _options_payload(self, session: Session) -> dict:
        return {
            "step_count": session.step_count,
            "step_duration": session.step_duration,
            "timing": self._config.timing.model_dump(mode="json"),
            "video": self._config.video.model_dump(mode="json"),
        }

    def _writer_kwargs(self) -> dict:
        return {
            "flush_every_lines": self._config.writer.flush_every_lines,
            "flush_every_s": self._config.writer.flush_every_s,
        }

    def _write_steps(self, root: Path, session: Session) -> None:
        kwargs = self._writer_kwargs()
        with (
            (root / ACTIONS_FILE).open("w", encoding="utf-8", newline="\n") as actions_fh,
            (root / COMPILED_FILE).open("w", encoding="utf-8", newline="\n") as compiled_fh,
            (root / THOUGHTS_FILE).open("w", encoding="utf-8", newline="\n") as thoughts_fh,
            (root / EVENTS_FILE).open("w", encoding="utf-8", newline="\n") as events_fh,
        ):
            actions = JsonlWriter(actions_fh, **kwargs)
            compiled = JsonlWriter(compiled_fh, **kwargs)
            thoughts = JsonlWriter(thoughts_fh, **kwargs)
            events = JsonlWriter(events_fh, **kwargs)
            for record in session:
                actions.write_json(record.to_payload())
                compiled.write_line(record.compiled_action)
                thoughts.write_line(record.thought_line)
                for payload in record.event_payloads():
                    events.write_json(payload)
            for writer in (actions, compiled, thoughts, events):
                writer.flush()

    def _write_frame(self, root: Path, session: Session) -> str | None:
        frame = session.frame
        if frame is None:
            return None
        video = self._config.video
        if not video.enabled:
            (root / RAW_FRAME_FILE).write_bytes(frame)
            return RAW_FRAME_FILE

        ffmpeg_path = find_ffmpeg(video.ffmpeg_path)
        if ffmpeg_path is None:
            raise SessionWriteError(
                "ffmpeg not found; set video.ffmpeg_path or disable video.enabled"
            )
        settings = FfmpegSettings.from_config(video, ffmpeg_path, root / VIDEO_FILE)
        if len(frame) != settings.frame_bytes:
            raise SessionWriteError(
                f"frame has {len(frame)} bytes; expected {settings.frame_bytes} "
                f"for {settings.width}x{settings.height} BGRA"
            )
        with self._ffmpeg_factory(settings) as encoder:
            encoder.write_frame(frame)
        return VIDEO_FILE

    @staticmethod
    def _write_json(path: Path, payload: dict) -> None:
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
