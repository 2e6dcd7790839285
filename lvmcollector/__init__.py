"""End-LVM collector: windowed input traces for learned control models."""

from __future__ import annotations

from .config import AppConfig, load_config
from .errors import CollectorError, IncompleteSession, MalformedEvent, SessionWriteError
from .logging_utils import configure_logging
from .session import Session, StepRecord, build_session, replay_session

__all__ = [
    "AppConfig",
    "CollectorError",
    "IncompleteSession",
    "MalformedEvent",
    "Session",
    "SessionWriteError",
    "StepRecord",
    "build_session",
    "configure_logging",
    "load_config",
    "replay_session",
]
