"""Session persistence: JSONL writers, ffmpeg encoding, dataset layout."""

from .ffmpeg import FfmpegSettings, FfmpegWriter, find_ffmpeg
from .jsonl import JsonlWriter
from .session_writer import SessionLayout, SessionMeta, SessionWriter

__all__ = [
    "FfmpegSettings",
    "FfmpegWriter",
    "JsonlWriter",
    "SessionLayout",
    "SessionMeta",
    "SessionWriter",
    "find_ffmpeg",
]
