"""Input state machine replayed over ordered events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .types import InputEvent, KeyDown, KeyUp, MouseButton, MouseMove, MouseWheel


@dataclass(frozen=True, slots=True)
class InputSnapshot:
    """Input state observed at one point of the replay."""

    held_keys: frozenset[str] = field(default_factory=frozenset)
    held_buttons: frozenset[str] = field(default_factory=frozenset)
    move_dx: int = 0
    move_dy: int = 0
    wheel_delta: int = 0

    def to_payload(self) -> dict:
        return {
            "held_keys": sorted(self.held_keys),
            "held_buttons": sorted(self.held_buttons),
            "move": [self.move_dx, self.move_dy],
            "wheel": self.wheel_delta,
        }


class InputStateMachine:
    """Tracks latched keys/buttons and per-window move/wheel accumulators.

    Held keys and buttons persist until released. Move and wheel deltas
    accumulate until :meth:`close_window` hands them out and resets them.
    """

    def __init__(self) -> None:
        self._held_keys: set[str] = set()
        self._held_buttons: set[str] = set()
        self._move_dx = 0
        self._move_dy = 0
        self._wheel_delta = 0

    def apply(self, event: InputEvent) -> None:
        if isinstance(event, KeyDown):
            self._held_keys.add(event.key)
        elif isinstance(event, KeyUp):
            self._held_keys.discard(event.key)
        elif isinstance(event, MouseButton):
            if event.is_down:
                self._held_buttons.add(event.button)
            else:
                self._held_buttons.discard(event.button)
        elif isinstance(event, MouseMove):
            self._move_dx += event.dx
            self._move_dy += event.dy
        elif isinstance(event, MouseWheel):
            self._wheel_delta += event.delta

    def snapshot(self) -> InputSnapshot:
        return InputSnapshot(
            held_keys=frozenset(self._held_keys),
            held_buttons=frozenset(self._held_buttons),
            move_dx=self._move_dx,
            move_dy=self._move_dy,
            wheel_delta=self._wheel_delta,
        )

    def close_window(self) -> InputSnapshot:
        snapshot = self.snapshot()
        self._move_dx = 0
        self._move_dy = 0
        self._wheel_delta = 0
        return snapshot


def replay(events: Iterable[InputEvent]) -> Iterator[InputSnapshot]:
    """Yield the state after each event, starting from an empty state."""

    machine = InputStateMachine()
    for event in events:
        machine.apply(event)
        yield machine.snapshot()
