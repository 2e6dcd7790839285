"""Line-oriented writers with periodic flushing."""

from __future__ import annotations

import json
import time
from typing import IO, Any


class JsonlWriter:
    """Write one JSON document or text line per line.

    Flushes every ``flush_every_lines`` lines or once ``flush_every_s``
    seconds passed since the previous flush, whichever comes first.
    """

    def __init__(
        self,
        handle: IO[str],
        *,
        flush_every_lines: int = 10,
        flush_every_s: float = 1.0,
    ) -> None:
        self._handle = handle
        self._flush_every_lines = max(1, flush_every_lines)
        self._flush_every_s = flush_every_s
        self._line_count = 0
        self._last_flush = time.monotonic()

    @property
    def line_count(self) -> int:
        return self._line_count

    def write_json(self, value: Any) -> None:
        self._handle.write(
            json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
        )
        self._handle.write("\n")
        self._after_write()

    def write_line(self, line: str) -> None:
        self._handle.write(line)
        self._handle.write("\n")
        self._after_write()

    def flush(self) -> None:
        self._last_flush = time.monotonic()
        self._handle.flush()

    def _after_write(self) -> None:
        self._line_count += 1
        if (
            self._line_count % self._flush_every_lines == 0
            or time.monotonic() - self._last_flush >= self._flush_every_s
        ):
            self.flush()
