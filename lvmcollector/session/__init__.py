"""Event windowing and session assembly."""

from .assembler import Session, SessionDiagnostics, assemble
from .pipeline import build_session, replay_session
from .records import SessionRecordBuilder, StepRecord, compile_action, format_thought_line
from .windowing import DropCounts, SlicedEvents, Window, WindowSlicer

__all__ = [
    "DropCounts",
    "Session",
    "SessionDiagnostics",
    "SessionRecordBuilder",
    "SlicedEvents",
    "StepRecord",
    "Window",
    "WindowSlicer",
    "assemble",
    "build_session",
    "compile_action",
    "format_thought_line",
    "replay_session",
]
