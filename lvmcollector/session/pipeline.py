"""Replay pipeline: slice, fold, build and assemble one session."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..events.loader import EventLog, load_events, load_thoughts, stable_sort_by_ts
from ..events.types import InputEvent, ThoughtAnnotation
from ..logging_utils import get_logger
from .assembler import Session, SessionDiagnostics, assemble
from .records import SessionRecordBuilder
from .windowing import WindowSlicer

_log = get_logger("session.pipeline")


def build_session(
    events: Sequence[InputEvent] | EventLog,
    *,
    step_count: int,
    step_duration: int,
    frame: bytes | None = None,
    thoughts: Sequence[ThoughtAnnotation] = (),
) -> Session:
    """Stably order ``events`` and fold them into ``step_count`` fixed-duration steps."""

    reordered = 0
    if isinstance(events, EventLog):
        reordered = events.reordered
        events = events.events
    events, unsorted = stable_sort_by_ts(events)
    reordered += unsorted
    slicer = WindowSlicer(step_count, step_duration)
    sliced = slicer.slice(events)
    built = SessionRecordBuilder(slicer).build(sliced, frame=frame, thoughts=thoughts)
    diagnostics = SessionDiagnostics(
        dropped_events_before=sliced.dropped.before,
        dropped_events_after=sliced.dropped.after,
        dropped_thoughts=built.thought_drops.outside,
        superseded_thoughts=built.thought_drops.superseded,
        reordered_events=reordered,
    )
    session = assemble(
        built.records,
        step_count=step_count,
        step_duration=step_duration,
        diagnostics=diagnostics,
    )
    _log.info(
        "Assembled session: steps={} duration={} events={} dropped={}",
        session.step_count,
        session.duration,
        sum(len(record.events) for record in session),
        diagnostics.dropped_events,
    )
    return session


def replay_session(
    events_path: Path | str,
    *,
    step_count: int,
    step_duration: int,
    thoughts_path: Path | str | None = None,
    frame: bytes | None = None,
) -> Session:
    event_log = load_events(events_path)
    thoughts = load_thoughts(thoughts_path) if thoughts_path is not None else ()
    return build_session(
        event_log,
        step_count=step_count,
        step_duration=step_duration,
        frame=frame,
        thoughts=thoughts,
    )
