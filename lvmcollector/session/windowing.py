"""Fixed-duration window slicing of the session timeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, TypeVar

from ..events.types import InputEvent
from ..logging_utils import get_logger


class _Timestamped(Protocol):
    @property
    def qpc_ts(self) -> int: ...


_T = TypeVar("_T", bound=_Timestamped)


@dataclass(frozen=True, slots=True)
class Window:
    """Half-open interval ``[start, end)`` owned by one step."""

    step_index: int
    start: int
    end: int

    def contains(self, qpc_ts: int) -> bool:
        return self.start <= qpc_ts < self.end


@dataclass(frozen=True, slots=True)
class DropCounts:
    before: int = 0
    after: int = 0

    @property
    def total(self) -> int:
        return self.before + self.after


@dataclass(frozen=True, slots=True)
class SlicedEvents:
    windows: tuple[Window, ...]
    events: tuple[tuple[InputEvent, ...], ...]
    dropped: DropCounts

    def __iter__(self):
        return iter(zip(self.windows, self.events))


class WindowSlicer:
    """Partition timestamped records into ``step_count`` equal windows."""

    def __init__(self, step_count: int, step_duration: int) -> None:
        if step_count < 1:
            raise ValueError(f"step_count must be positive, got {step_count}")
        if step_duration < 1:
            raise ValueError(f"step_duration must be positive, got {step_duration}")
        self._step_count = step_count
        self._step_duration = step_duration
        self._log = get_logger("session.windowing")

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def step_duration(self) -> int:
        return self._step_duration

    @property
    def session_end(self) -> int:
        return self._step_count * self._step_duration

    def window(self, step_index: int) -> Window:
        if not 0 <= step_index < self._step_count:
            raise IndexError(f"step_index {step_index} outside 0..{self._step_count - 1}")
        start = step_index * self._step_duration
        return Window(step_index=step_index, start=start, end=start + self._step_duration)

    def windows(self) -> tuple[Window, ...]:
        return tuple(self.window(index) for index in range(self._step_count))

    def locate(self, qpc_ts: int) -> int | None:
        """Return the owning step index, or ``None`` outside the session."""

        if qpc_ts < 0 or qpc_ts >= self.session_end:
            return None
        return qpc_ts // self._step_duration

    def partition(self, records: Iterable[_T]) -> tuple[list[list[_T]], DropCounts]:
        buckets: list[list[_T]] = [[] for _ in range(self._step_count)]
        before = 0
        after = 0
        for record in records:
            index = self.locate(record.qpc_ts)
            if index is None:
                if record.qpc_ts < 0:
                    before += 1
                else:
                    after += 1
                continue
            buckets[index].append(record)
        return buckets, DropCounts(before=before, after=after)

    def slice(self, events: Sequence[InputEvent]) -> SlicedEvents:
        buckets, dropped = self.partition(events)
        if dropped.total:
            self._log.warning(
                "Dropped {} events outside [0, {}) (before={}, after={})",
                dropped.total,
                self.session_end,
                dropped.before,
                dropped.after,
            )
        return SlicedEvents(
            windows=self.windows(),
            events=tuple(tuple(bucket) for bucket in buckets),
            dropped=dropped,
        )
