"""Configuration loading and validation using Pydantic models."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class TimingConfig(BaseModel):
    step_ms: int = Field(
        200,
        ge=1,
        description="Duration of one step in milliseconds.",
    )
    ticks_per_ms: int = Field(
        1,
        ge=1,
        description="Event timestamp units per millisecond (QPC ticks when replaying raw logs).",
    )

    @property
    def step_duration(self) -> int:
        """Step duration expressed in event timestamp units."""

        return self.step_ms * self.ticks_per_ms


class VideoConfig(BaseModel):
    enabled: bool = Field(
        True,
        description="Encode the attached frame with ffmpeg; store raw BGRA bytes when disabled.",
    )
    ffmpeg_path: Optional[Path] = Field(
        None,
        description="Explicit ffmpeg binary; searched on PATH when unset.",
    )
    record_resolution: tuple[int, int] = Field((1280, 720))
    fps: int = Field(5, ge=1)
    crf: int = Field(20, ge=0, le=51)
    gop: int = Field(10, ge=1)


class WriterConfig(BaseModel):
    flush_every_lines: int = Field(10, ge=1)
    flush_every_s: float = Field(1.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    log_dir: Optional[Path] = Field(
        None,
        description="Directory for the rotating log file; the XDG state directory when unset.",
    )


class AppConfig(BaseModel):
    dataset_root: Path = Field(
        Path("./dataset"),
        description="Existing directory that receives the sessions/ tree.",
    )
    timing: TimingConfig = TimingConfig()
    video: VideoConfig = VideoConfig()
    writer: WriterConfig = WriterConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(path: Path | str) -> AppConfig:
    """Load YAML configuration from disk."""

    config_path = Path(path)
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return AppConfig.model_validate(data or {})
