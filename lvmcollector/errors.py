"""Collector error types."""

from __future__ import annotations


class CollectorError(RuntimeError):
    """Base error for the collector."""


class MalformedEvent(CollectorError):
    """A source record does not match the event or thought schema."""

    def __init__(self, line_no: int, reason: str, *, source: str | None = None) -> None:
        self.line_no = line_no
        self.reason = reason
        self.source = source
        where = f"{source}:{line_no}" if source else f"line {line_no}"
        super().__init__(f"Malformed record at {where}: {reason}")


class IncompleteSession(CollectorError):
    """Assembled records do not cover every step exactly once."""


class SessionWriteError(CollectorError):
    """Persisting a session to the dataset root failed."""
