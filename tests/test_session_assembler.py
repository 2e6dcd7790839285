from __future__ import annotations

import dataclasses

import pytest

from lvmcollector.errors import IncompleteSession
from lvmcollector.session.assembler import SessionDiagnostics, assemble
from lvmcollector.session.records import SessionRecordBuilder
from lvmcollector.session.windowing import WindowSlicer


def _records(step_count: int = 3):
    slicer = WindowSlicer(step_count, 100)
    return list(SessionRecordBuilder(slicer).build(slicer.slice([])).records)


def test_orders_records_by_step_index() -> None:
    records = _records()
    session = assemble(list(reversed(records)), step_count=3, step_duration=100)
    assert [record.step_index for record in session] == [0, 1, 2]
    assert session.duration == 300
    assert session.diagnostics == SessionDiagnostics()


def test_missing_step_raises() -> None:
    records = _records()
    with pytest.raises(IncompleteSession):
        assemble(records[:2], step_count=3, step_duration=100)


def test_duplicate_step_raises() -> None:
    records = _records()
    duplicate = dataclasses.replace(records[2], step_index=1)
    with pytest.raises(IncompleteSession):
        assemble([records[0], records[1], duplicate], step_count=3, step_duration=100)


def test_diagnostics_payload_includes_totals() -> None:
    diagnostics = SessionDiagnostics(dropped_events_before=1, dropped_events_after=2)
    payload = diagnostics.to_payload()
    assert payload["dropped_events"] == 3
    assert payload["reordered_events"] == 0
