"""Per-step record building."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..events.state import InputSnapshot, InputStateMachine
from ..events.types import InputEvent, ThoughtAnnotation, event_to_wire
from ..logging_utils import get_logger
from .windowing import SlicedEvents, Window, WindowSlicer

THOUGHT_START = "<|thought_start|>"
THOUGHT_END = "<|thought_end|>"
ACTION_START = "<|action_start|>"
ACTION_END = "<|action_end|>"


@dataclass(frozen=True, slots=True)
class StepRecord:
    step_index: int
    window: Window
    events: tuple[InputEvent, ...]
    state: InputSnapshot
    frame: Optional[bytes] = None
    thought: Optional[ThoughtAnnotation] = None

    @property
    def compiled_action(self) -> str:
        return compile_action(self.state)

    @property
    def thought_line(self) -> str:
        return format_thought_line(self.thought.text if self.thought else "")

    def to_payload(self, *, include_events: bool = False) -> dict:
        payload = {
            "step_index": self.step_index,
            "window_start": self.window.start,
            "window_end": self.window.end,
            "event_count": len(self.events),
            "state": self.state.to_payload(),
            "frame_bytes": len(self.frame) if self.frame is not None else None,
            "thought": self.thought.text if self.thought else None,
        }
        if include_events:
            payload["events"] = [event_to_wire(event) for event in self.events]
        return payload

    def event_payloads(self) -> list[dict]:
        return [
            {"step_index": self.step_index, **event_to_wire(event)}
            for event in self.events
        ]


@dataclass(frozen=True, slots=True)
class ThoughtDrops:
    outside: int = 0
    superseded: int = 0


@dataclass(frozen=True, slots=True)
class BuiltRecords:
    records: tuple[StepRecord, ...]
    thought_drops: ThoughtDrops


def format_thought_line(content: str) -> str:
    if not content:
        return f"{THOUGHT_START}{THOUGHT_END}"
    if THOUGHT_START in content and THOUGHT_END in content:
        return content
    return f"{THOUGHT_START}{content} {THOUGHT_END}"


def compile_action(state: InputSnapshot) -> str:
    keys = " ".join(sorted(state.held_keys)) or "-"
    buttons = " ".join(sorted(state.held_buttons)) or "-"
    return (
        f"{ACTION_START}{keys} ; {buttons} ; "
        f"{state.move_dx} {state.move_dy} ; {state.wheel_delta}{ACTION_END}"
    )


class SessionRecordBuilder:
    """Fold windowed events into one immutable record per step."""

    def __init__(self, slicer: WindowSlicer) -> None:
        self._slicer = slicer
        self._log = get_logger("session.records")

    def attach_thoughts(
        self, thoughts: Iterable[ThoughtAnnotation]
    ) -> tuple[list[Optional[ThoughtAnnotation]], ThoughtDrops]:
        ordered = sorted(thoughts, key=lambda thought: thought.qpc_ts)
        buckets, dropped = self._slicer.partition(ordered)
        superseded = sum(max(0, len(bucket) - 1) for bucket in buckets)
        if dropped.total:
            self._log.warning(
                "Dropped {} thoughts outside the session range", dropped.total
            )
        if superseded:
            self._log.info("{} thoughts superseded by later ones in the same step", superseded)
        attached = [bucket[-1] if bucket else None for bucket in buckets]
        return attached, ThoughtDrops(outside=dropped.total, superseded=superseded)

    def build(
        self,
        sliced: SlicedEvents,
        *,
        frame: bytes | bytearray | memoryview | None = None,
        thoughts: Sequence[ThoughtAnnotation] = (),
    ) -> BuiltRecords:
        attached, thought_drops = self.attach_thoughts(thoughts)
        machine = InputStateMachine()
        records: list[StepRecord] = []
        for window, events in sliced:
            for event in events:
                machine.apply(event)
            records.append(
                StepRecord(
                    step_index=window.step_index,
                    window=window,
                    events=events,
                    state=machine.close_window(),
                    frame=bytes(frame) if frame is not None and window.step_index == 0 else None,
                    thought=attached[window.step_index],
                )
            )
        return BuiltRecords(records=tuple(records), thought_drops=thought_drops)
