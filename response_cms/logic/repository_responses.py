"""Response store backed by a remote sheet.

The sheet has no keyed access and no unique index, so every mutation reads
the full grid, resolves the target row by key, then writes positionally.
`locate_row` is the single place that resolves a key to a sheet row.

Concurrency: the store holds no locks and the backend offers no
compare-and-swap. A write racing between `locate_row` and the positional
update/delete may target a shifted row. This is an accepted limitation.

Sheet layout: row 1 is always the header; columns A..D are `key`,
`response_text`, `notes`, `last_updated`. When several rows share a key the
first one wins for get/update/delete.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from response_cms.logic import events
from response_cms.logic.errors import ErrorKind, StoreError, conflict, not_found
from response_cms.logic.sheets_backend import TabularBackend
from response_cms.models.response import KEY_PATTERN, Response

logger = logging.getLogger(__name__)

COLUMNS: Tuple[str, str, str, str] = ("key", "response_text", "notes", "last_updated")
HEADER_ROWS = 1
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_SEARCH_LIMIT = 100

_KEY_RE = re.compile(KEY_PATTERN)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RowLocation:
    """Where a key was found: 1-based sheet row number and the parsed record."""

    row_number: int
    record: Response


def _cell(row: Sequence[str], idx: int) -> str:
    return str(row[idx]) if idx < len(row) and row[idx] is not None else ""


def _to_record(row: Sequence[str]) -> Response:
    return Response(
        key=_cell(row, 0).strip(),
        response_text=_cell(row, 1),
        notes=_cell(row, 2),
        last_updated=_cell(row, 3),
    )


def _matches(record: Response, needle: str) -> bool:
    return (
        needle in record.key.lower()
        or needle in record.response_text.lower()
        or needle in record.notes.lower()
    )


class ResponseStore:
    """Single source of truth for Response records.

    Holds no state of its own; every call round-trips to the backend.
    """

    def __init__(
        self,
        backend: TabularBackend,
        *,
        clock: Optional[Clock] = None,
        publish: Callable[[str, dict], None] = events.publish,
    ) -> None:
        self.backend = backend
        self._clock = clock or _utcnow
        self._publish = publish
        self._header_warned = False

    # -- reads ---------------------------------------------------------------

    def _timestamp(self) -> str:
        return self._clock().strftime(TIMESTAMP_FORMAT)

    def _check_header(self, header: Sequence[str]) -> None:
        labels = tuple(str(h).strip().lower() for h in list(header)[: len(COLUMNS)])
        if labels != COLUMNS and not self._header_warned:
            self._header_warned = True
            logger.warning(
                "sheet header %s does not match expected columns %s; reading positionally",
                list(header),
                list(COLUMNS),
            )

    def _rows(self) -> List[Tuple[int, Response]]:
        """Return `(row_number, record)` for every non-blank data row."""
        grid = self.backend.read_rows()
        if not grid:
            return []
        self._check_header(grid[0])
        out: List[Tuple[int, Response]] = []
        for idx, row in enumerate(grid[HEADER_ROWS:]):
            record = _to_record(row)
            if not record.key:
                continue
            # data index 0 lives on sheet row 2 (1-based, after the header)
            out.append((idx + HEADER_ROWS + 1, record))
        return out

    def list(self) -> List[Response]:
        return [record for _, record in self._rows()]

    def page(self, limit: int, offset: int = 0) -> List[Response]:
        if limit < 1 or offset < 0:
            raise StoreError(ErrorKind.VALIDATION, "limit must be >= 1 and offset >= 0")
        return self.list()[offset:offset + limit]

    def search(self, query: Optional[str], limit: int = DEFAULT_SEARCH_LIMIT) -> List[Response]:
        if limit < 1:
            raise StoreError(ErrorKind.VALIDATION, "limit must be >= 1")
        records = self.list()
        if not (query or "").strip():
            return records[:limit]
        needle = query.lower()
        return [r for r in records if _matches(r, needle)][:limit]

    def locate_row(self, key: str) -> RowLocation:
        """Resolve `key` to its current sheet row; first match wins on duplicates."""
        for row_number, record in self._rows():
            if record.key == key:
                return RowLocation(row_number=row_number, record=record)
        raise not_found(key)

    def get(self, key: str) -> Response:
        return self.locate_row(key).record

    # -- writes --------------------------------------------------------------

    @staticmethod
    def _validate_key(key: str) -> None:
        if not isinstance(key, str) or not _KEY_RE.fullmatch(key):
            raise StoreError(
                ErrorKind.VALIDATION,
                "Key must contain only letters, digits and underscores",
                details=[{"field": "key", "msg": "invalid key"}],
            )

    @staticmethod
    def _validate_text(response_text: str) -> None:
        if not isinstance(response_text, str) or not response_text.strip():
            raise StoreError(
                ErrorKind.VALIDATION,
                "Response text is required",
                details=[{"field": "response_text", "msg": "Response text is required"}],
            )

    def create(self, key: str, response_text: str, notes: Optional[str] = None) -> Response:
        self._validate_key(key)
        self._validate_text(response_text)
        if any(record.key == key for _, record in self._rows()):
            logger.info("response_create_conflict key=%s", key)
            raise conflict(key)
        record = Response(key=key, response_text=response_text, notes=notes or "", last_updated=self._timestamp())
        self.backend.append_row([record.key, record.response_text, record.notes, record.last_updated])
        logger.info("response_created key=%s", key)
        self._publish(events.RESPONSE_CREATED, {"key": key, "last_updated": record.last_updated})
        return record

    def update(self, key: str, response_text: str, notes: Optional[str] = None) -> Response:
        self._validate_text(response_text)
        location = self.locate_row(key)
        record = Response(key=key, response_text=response_text, notes=notes or "", last_updated=self._timestamp())
        self.backend.update_row(
            location.row_number,
            [record.response_text, record.notes, record.last_updated],
            first_column=1,
        )
        logger.info("response_updated key=%s row=%s", key, location.row_number)
        self._publish(events.RESPONSE_UPDATED, {"key": key, "last_updated": record.last_updated})
        return record

    def delete(self, key: str) -> None:
        location = self.locate_row(key)
        self.backend.delete_row(location.row_number)
        logger.info("response_deleted key=%s row=%s", key, location.row_number)
        self._publish(events.RESPONSE_DELETED, {"key": key})


__all__ = [
    "ResponseStore",
    "RowLocation",
    "COLUMNS",
    "HEADER_ROWS",
    "TIMESTAMP_FORMAT",
    "DEFAULT_SEARCH_LIMIT",
]
