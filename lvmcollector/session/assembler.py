"""Session assembly and completeness checks."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Iterable, Iterator

from ..errors import IncompleteSession
from .records import StepRecord


@dataclass(frozen=True, slots=True)
class SessionDiagnostics:
    """Non-fatal findings reported alongside a successful session."""

    dropped_events_before: int = 0
    dropped_events_after: int = 0
    dropped_thoughts: int = 0
    superseded_thoughts: int = 0
    reordered_events: int = 0

    @property
    def dropped_events(self) -> int:
        return self.dropped_events_before + self.dropped_events_after

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["dropped_events"] = self.dropped_events
        return payload


@dataclass(frozen=True, slots=True)
class Session:
    records: tuple[StepRecord, ...]
    step_duration: int
    diagnostics: SessionDiagnostics = field(default_factory=SessionDiagnostics)

    @property
    def step_count(self) -> int:
        return len(self.records)

    @property
    def duration(self) -> int:
        return self.step_count * self.step_duration

    @property
    def frame(self) -> bytes | None:
        return self.records[0].frame if self.records else None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[StepRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> StepRecord:
        return self.records[index]

    def to_jsonl(self) -> str:
        """Serialize one line per step (snapshot plus its events); stable across runs."""

        return "".join(
            json.dumps(
                record.to_payload(include_events=True),
                sort_keys=True,
                separators=(",", ":"),
            )
            + "\n"
            for record in self.records
        )


def assemble(
    records: Iterable[StepRecord],
    *,
    step_count: int,
    step_duration: int,
    diagnostics: SessionDiagnostics | None = None,
) -> Session:
    ordered = sorted(records, key=lambda record: record.step_index)
    if len(ordered) != step_count:
        raise IncompleteSession(
            f"expected {step_count} step records, got {len(ordered)}"
        )
    for expected, record in enumerate(ordered):
        if record.step_index != expected:
            raise IncompleteSession(
                f"step {expected} missing or duplicated (found step {record.step_index})"
            )
    return Session(
        records=tuple(ordered),
        step_duration=step_duration,
        diagnostics=diagnostics or SessionDiagnostics(),
    )
