"""Load recorded input events and thought annotations from JSONL logs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import MalformedEvent
from ..logging_utils import get_logger
from .types import EVENT_ADAPTER, InputEvent, ThoughtAnnotation

_log = get_logger("events.loader")

_T = TypeVar("_T", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class EventLog:
    """Events ordered by timestamp plus how many arrived out of order."""

    events: tuple[InputEvent, ...]
    reordered: int = 0

    def __len__(self) -> int:
        return len(self.events)


def parse_event_lines(
    lines: Iterable[str | bytes], *, source: str | None = None
) -> EventLog:
    """Decode one event per non-blank line and stably sort by ``qpc_ts``."""

    events: list[InputEvent] = []
    for line_no, line in _numbered(lines, source):
        try:
            events.append(EVENT_ADAPTER.validate_json(line))
        except ValidationError as exc:
            raise MalformedEvent(line_no, _reason(exc), source=source) from exc
    ordered, reordered = stable_sort_by_ts(events)
    if reordered:
        _log.warning(
            "Re-sorted {} out-of-order events (source={})",
            reordered,
            source or "<lines>",
        )
    _log.debug("Loaded {} events (source={})", len(ordered), source or "<lines>")
    return EventLog(events=tuple(ordered), reordered=reordered)


def load_events(path: Path | str) -> EventLog:
    event_path = Path(path)
    with event_path.open("rb") as fh:
        return parse_event_lines(fh, source=str(event_path))


def parse_thought_lines(
    lines: Iterable[str | bytes], *, source: str | None = None
) -> tuple[ThoughtAnnotation, ...]:
    thoughts: list[ThoughtAnnotation] = []
    for line_no, line in _numbered(lines, source):
        try:
            thoughts.append(ThoughtAnnotation.model_validate_json(line))
        except ValidationError as exc:
            raise MalformedEvent(line_no, _reason(exc), source=source) from exc
    ordered, _ = stable_sort_by_ts(thoughts)
    return tuple(ordered)


def load_thoughts(path: Path | str) -> tuple[ThoughtAnnotation, ...]:
    thought_path = Path(path)
    with thought_path.open("rb") as fh:
        return parse_thought_lines(fh, source=str(thought_path))


def stable_sort_by_ts(records: Sequence[_T]) -> tuple[list[_T], int]:
    """Sort by ``qpc_ts`` keeping input order for ties.

    Returns the sorted list and the number of records that were behind an
    earlier record's timestamp when read.
    """

    reordered = 0
    high_water: int | None = None
    for record in records:
        if high_water is not None and record.qpc_ts < high_water:
            reordered += 1
        else:
            high_water = record.qpc_ts
    if not reordered:
        return list(records), 0
    return sorted(records, key=lambda record: record.qpc_ts), reordered


def _numbered(
    lines: Iterable[str | bytes], source: str | None
) -> Iterable[tuple[int, str]]:
    for line_no, raw in enumerate(lines, start=1):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedEvent(
                    line_no, f"invalid UTF-8 at byte {exc.start}", source=source
                ) from exc
        line = raw.strip()
        if not line:
            continue
        yield line_no, line


def _reason(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid record")
    return f"{loc}: {message}" if loc else message
