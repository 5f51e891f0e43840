"""
Batching cursor with an optional batch transform hook.

Rows are decoded into an in-memory batch of up to `batch_size` records. Each
completed, non-empty batch is handed to the transform exactly once, which is
the place to resolve associated records with a single follow-up query
(e.g. `WHERE post_id IN (...)`). Records are then served one at a time.

A non-positive `batch_size` drains the whole remaining source into one batch.
"""

from __future__ import annotations

from typing import Any, List, Optional

from dbcursor.cursors.abstract import (
    AbstractCursor,
    ClosingGuard,
    RowSource,
    ScanFunc,
    TransformFunc,
    advance,
    source_error,
)
from dbcursor.errors import CursorError, DecodeError, TransformError
from dbcursor.utils.logging import get_logger

log = get_logger(__name__)


class BatchCursor(AbstractCursor):
    """
    Serves records from a batch buffer, refilling it from the row source.

    Parameters
    ----------
    rows : RowSource or None
        The source to read. None behaves as an empty source until `reset`
        installs one.
    batch_size : int
        Maximum number of records per batch; non-positive means unbounded.
    scan : ScanFunc
        Decodes one row into a record.
    transform : TransformFunc, optional
        Called once per non-empty batch; may mutate the records in place.
    """

    def __init__(
        self,
        rows: Optional[RowSource],
        batch_size: int,
        scan: ScanFunc,
        transform: Optional[TransformFunc] = None,
    ) -> None:
        self._scan = scan
        self._transform = transform
        self.batch_size = batch_size
        self._err: Optional[CursorError] = None
        self.reset(rows)

    def reset(self, rows: Optional[RowSource]) -> None:
        """
        Install a new row source.

        Clears the buffer, position and done flag. A recorded terminal error
        is kept. The previous source is not closed here.
        """
        self._rows = rows
        self._guard = ClosingGuard(rows)
        self._batch: List[Any] = []
        self._cur = -1
        self._done = False
        self._row_number = 0

    def record(self) -> Any:
        if -1 < self._cur < len(self._batch):
            return self._batch[self._cur]
        return None

    def next(self) -> bool:
        if self._err is not None or self._done:
            return False

        if self._step():
            return True

        try:
            self._fill()
        except CursorError as exc:
            log.warning("Cursor stopped: %s", exc, extra={"row_number": self._row_number})
            self._err = exc
            return False

        if self._step():
            return True

        self._done = True
        log.debug("Row source exhausted", extra={"rows": self._row_number})
        return False

    def err(self) -> Optional[CursorError]:
        return self._err

    def close(self) -> Optional[Exception]:
        return self._guard.close()

    @property
    def closed(self) -> bool:
        return self._guard.closed

    def _step(self) -> bool:
        if self._cur + 1 < len(self._batch):
            self._cur += 1
            return True
        return False

    def _fill(self) -> None:
        """
        Replace the batch with the next records from the source.
        """
        # A fresh list per refill keeps records handed out earlier intact.
        self._batch = []
        self._cur = -1

        rows = self._rows
        if rows is None:
            return

        while advance(rows):
            self._row_number += 1
            try:
                rec = self._scan(rows)
            except Exception as exc:
                raise DecodeError(self._row_number) from exc
            self._batch.append(rec)
            if 0 < self.batch_size <= len(self._batch):
                break

        err = source_error(rows)
        if err is not None:
            raise err

        if not self._batch or self._transform is None:
            return

        try:
            self._transform(self._batch)
        except Exception as exc:
            raise TransformError(len(self._batch)) from exc
        log.debug("Batch transformed", extra={"batch_size": len(self._batch)})


__all__ = ["BatchCursor"]
