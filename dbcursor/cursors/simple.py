"""
Simple forward cursor: one decoded record per advance.
"""

from __future__ import annotations

from typing import Any, Optional

from dbcursor.cursors.abstract import (
    AbstractCursor,
    ClosingGuard,
    RowSource,
    ScanFunc,
    advance,
    source_error,
)
from dbcursor.errors import CursorError, DecodeError
from dbcursor.utils.logging import get_logger

log = get_logger(__name__)


class SimpleCursor(AbstractCursor):
    """
    Wraps a single row source and decodes each row as it is reached.
    """

    def __init__(self, rows: RowSource, scan: ScanFunc) -> None:
        self._rows = rows
        self._scan = scan
        self._guard = ClosingGuard(rows)
        self._rec: Any = None
        self._err: Optional[CursorError] = None
        self._row_number = 0

    def record(self) -> Any:
        return self._rec

    def next(self) -> bool:
        if self._err is not None:
            return False

        try:
            if not advance(self._rows):
                return False
            self._row_number += 1
            try:
                rec = self._scan(self._rows)
            except Exception as exc:
                raise DecodeError(self._row_number) from exc
        except CursorError as exc:
            log.warning("Cursor stopped: %s", exc, extra={"row_number": self._row_number})
            self._err = exc
            return False

        self._rec = rec
        return True

    def err(self) -> Optional[CursorError]:
        # Some faults are only known once the source is exhausted.
        if self._err is None:
            self._err = source_error(self._rows)
        return self._err

    def close(self) -> Optional[Exception]:
        return self._guard.close()

    @property
    def closed(self) -> bool:
        return self._guard.closed


__all__ = ["SimpleCursor"]
