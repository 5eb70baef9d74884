"""In-memory tabular backend (dev/test only).

Mirrors the positional semantics of the Google Sheets backend: a list of rows
whose first entry is the header, addressed by 1-based row numbers. Used when
no sheet id is configured and by the functional tests.

`before_write` is invoked with `(operation, row_number)` immediately before a
positional update or delete, which lets tests interleave a competing mutation
between the store's locate-read and its write.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Optional, Sequence

from response_cms.logic.errors import upstream
from response_cms.logic.sheets_backend import TabularBackend

logger = logging.getLogger(__name__)

DEFAULT_HEADER: List[str] = ["key", "response_text", "notes", "last_updated"]

WriteHook = Callable[[str, int], None]


class InMemoryBackend(TabularBackend):
    def __init__(
        self,
        rows: Optional[Iterable[Sequence[str]]] = None,
        *,
        header: Optional[Sequence[str]] = None,
    ) -> None:
        """`rows` is the full grid, header first, unless `header` is passed separately."""
        self._lock = threading.Lock()
        self._rows: List[List[str]] = []
        if header is not None or rows is None:
            self._rows.append(list(header if header is not None else DEFAULT_HEADER))
        for row in rows or []:
            self._rows.append([str(c) for c in row])
        self.before_write: Optional[WriteHook] = None
        self.unavailable = False
        self.calls: List[str] = []

    def _check_available(self, action: str) -> None:
        self.calls.append(action)
        if self.unavailable:
            raise upstream(f"Failed to {action} Google Sheet")

    def _hook(self, operation: str, row_number: int) -> None:
        hook = self.before_write
        if hook is not None:
            hook(operation, row_number)

    def snapshot(self) -> List[List[str]]:
        with self._lock:
            return [list(r) for r in self._rows]

    def read_rows(self) -> List[List[str]]:
        self._check_available("read")
        return self.snapshot()

    def append_row(self, values: Sequence[str]) -> None:
        self._check_available("append to")
        with self._lock:
            self._rows.append([str(v) for v in values])

    def update_row(self, row_number: int, values: Sequence[str], *, first_column: int = 0) -> None:
        self._check_available("update")
        self._hook("update", row_number)
        with self._lock:
            if row_number < 1:
                raise upstream(f"Invalid row number {row_number}")
            # Sheets silently grows the grid for writes past the last row
            while len(self._rows) < row_number:
                self._rows.append([])
            row = self._rows[row_number - 1]
            needed = first_column + len(values)
            if len(row) < needed:
                row.extend([""] * (needed - len(row)))
            for offset, value in enumerate(values):
                row[first_column + offset] = str(value)

    def delete_row(self, row_number: int) -> None:
        self._check_available("delete from")
        self._hook("delete", row_number)
        with self._lock:
            if 1 <= row_number <= len(self._rows):
                del self._rows[row_number - 1]
            else:
                logger.warning("delete_row ignored out-of-range row %s", row_number)


__all__ = ["InMemoryBackend", "DEFAULT_HEADER"]
