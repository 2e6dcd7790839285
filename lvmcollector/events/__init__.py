"""Input event contracts, loaders and state replay."""

from .loader import EventLog, load_events, load_thoughts, parse_event_lines, parse_thought_lines
from .state import InputSnapshot, InputStateMachine, replay
from .types import (
    BUTTONS,
    InputEvent,
    KeyDown,
    KeyUp,
    MouseButton,
    MouseMove,
    MouseWheel,
    ThoughtAnnotation,
)

__all__ = [
    "BUTTONS",
    "EventLog",
    "InputEvent",
    "InputSnapshot",
    "InputStateMachine",
    "KeyDown",
    "KeyUp",
    "MouseButton",
    "MouseMove",
    "MouseWheel",
    "ThoughtAnnotation",
    "load_events",
    "load_thoughts",
    "parse_event_lines",
    "parse_thought_lines",
    "replay",
]
