"""FFmpeg-backed encoder for raw BGRA frames."""

from __future__ import annotations

import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import VideoConfig
from ..errors import SessionWriteError
from ..logging_utils import get_logger

BYTES_PER_PIXEL = 4


@dataclass(slots=True)
class FfmpegSettings:
    ffmpeg_path: Path
    output_path: Path
    width: int = 1280
    height: int = 720
    fps: int = 5
    crf: int = 20
    gop: int = 10

    @property
    def frame_bytes(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    @classmethod
    def from_config(
        cls, config: VideoConfig, ffmpeg_path: Path, output_path: Path
    ) -> "FfmpegSettings":
        width, height = config.record_resolution
        return cls(
            ffmpeg_path=ffmpeg_path,
            output_path=output_path,
            width=width,
            height=height,
            fps=config.fps,
            crf=config.crf,
            gop=config.gop,
        )


def find_ffmpeg(explicit: Path | None = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None

    name = "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"
    exe_dir = Path(sys.executable).resolve().parent
    candidate = exe_dir / name
    if candidate.exists():
        return candidate

    for path_dir in os.environ.get("PATH", "").split(os.pathsep):
        if not path_dir:
            continue
        ffmpeg_path = Path(path_dir) / name
        if ffmpeg_path.exists():
            return ffmpeg_path
    return None


def build_command(settings: FfmpegSettings) -> list[str]:
    return [
        str(settings.ffmpeg_path),
        "-hide_banner",
        "-loglevel",
        "warning",
        "-y",
        "-f",
        "rawvideo",
        "-pix_fmt",
        "bgra",
        "-s",
        f"{settings.width}x{settings.height}",
        "-r",
        str(settings.fps),
        "-i",
        "-",
        "-an",
        "-c:v",
        "libx264",
        "-crf",
        str(settings.crf),
        "-g",
        str(settings.gop),
        "-pix_fmt",
        "yuv420p",
        str(settings.output_path),
    ]


class FfmpegWriter:
    """Pipe raw BGRA frames into a single ffmpeg process."""

    def __init__(self, settings: FfmpegSettings, *, startup_grace_s: float = 0.25) -> None:
        self._settings = settings
        self._startup_grace_s = startup_grace_s
        self._log = get_logger("writer.ffmpeg")
        self._process: Optional[subprocess.Popen[bytes]] = None
        self._frames_written = 0

    @property
    def frames_written(self) -> int:
        return self._frames_written

    def start(self) -> None:
        if self._process is not None:
            return
        cmd = build_command(self._settings)
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise SessionWriteError(f"Failed to launch ffmpeg: {exc}") from exc

        if self._startup_grace_s:
            time.sleep(self._startup_grace_s)
        if process.poll() is not None:
            raise SessionWriteError(f"ffmpeg failed to start: {_stderr_text(process)}")
        self._process = process
        self._log.info(
            "ffmpeg started: {}x{} @ {} fps -> {}",
            self._settings.width,
            self._settings.height,
            self._settings.fps,
            self._settings.output_path,
        )

    def write_frame(self, frame: bytes) -> None:
        if len(frame) != self._settings.frame_bytes:
            raise SessionWriteError(
                "frame buffer size does not match expected BGRA size "
                f"({len(frame)} != {self._settings.frame_bytes})"
            )
        if self._process is None:
            self.start()
        assert self._process is not None and self._process.stdin is not None
        try:
            self._process.stdin.write(frame)
        except BrokenPipeError as exc:
            self.terminate()
            raise SessionWriteError("ffmpeg pipe closed unexpectedly") from exc
        self._frames_written += 1

    def finish(self, timeout_s: float = 10.0) -> None:
        process = self._process
        if process is None:
            return
        if process.stdin:
            try:
                process.stdin.close()
            except BrokenPipeError:
                self._log.warning("ffmpeg pipe already closed at finish")
        try:
            return_code = process.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired as exc:
            self.terminate()
            raise SessionWriteError("ffmpeg did not exit in time") from exc
        self._process = None
        if return_code != 0:
            raise SessionWriteError(
                f"ffmpeg exited with {return_code}: {_stderr_text(process)}"
            )
        self._log.info("ffmpeg finished ({} frames)", self._frames_written)

    def terminate(self) -> None:
        if self._process is None:
            return
        self._process.terminate()
        try:
            self._process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            self._process.kill()
        self._process = None

    def __enter__(self) -> "FfmpegWriter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()
        else:
            self.terminate()


def _stderr_text(process: subprocess.Popen[bytes]) -> str:
    if process.stderr is None:
        return ""
    output = process.stderr.read() or b""
    return output.decode("utf-8", errors="ignore").strip()
