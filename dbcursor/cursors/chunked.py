"""
Chunked (incremental) cursor: splices successive result sets into one stream.

The query factory is called whenever the current chunk has been drained. The
caller usually advances a watermark from the records it sees, so each call
returns the next page:

    last_id = 0

    def next_page():
        return query(conn, "SELECT id, title FROM posts WHERE id > ? "
                           "ORDER BY id LIMIT 300", (last_id,))

    cur = ChunkedCursor(next_page, scan_post)
    while cur.next():
        last_id = cur.record().id

Iteration ends when a freshly opened chunk yields no records.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from dbcursor.cursors.abstract import (
    AbstractCursor,
    QueryFactory,
    RowSource,
    ScanFunc,
    TransformFunc,
)
from dbcursor.cursors.batch import BatchCursor
from dbcursor.errors import CursorError, FactoryError
from dbcursor.utils.logging import get_logger

log = get_logger(__name__)


class ChunkState(enum.Enum):
    """Progress of the current chunk."""

    UNOPENED = "unopened"
    FRESH = "fresh"
    YIELDING = "yielding"


class ChunkedCursor(AbstractCursor):
    """
    Composes a BatchCursor with a query factory.

    Each chunk is consumed as a single batch, so the transform runs once per
    non-empty chunk.
    """

    def __init__(
        self,
        factory: QueryFactory,
        scan: ScanFunc,
        transform: Optional[TransformFunc] = None,
    ) -> None:
        self._factory = factory
        self._batch = BatchCursor(None, 0, scan, transform)
        self._rows: Optional[RowSource] = None
        self._err: Optional[CursorError] = None
        self._done = False
        self._close_err: Optional[Exception] = None
        self.state = ChunkState.UNOPENED
        self.chunks = 0

    def record(self) -> Any:
        return self._batch.record()

    def next(self) -> bool:
        if self._err is not None or self._done:
            return False

        while True:
            if self._rows is None and not self._open():
                return False

            if self._batch.next():
                self.state = ChunkState.YIELDING
                return True

            if self._batch.err() is not None:
                return False

            if self.state is ChunkState.FRESH:
                log.debug("End of stream", extra={"chunks": self.chunks})
                self._done = True
                return False

            # Drained a chunk that had records: release it, ask for the next.
            err = self._batch.close()
            if err is not None and self._close_err is None:
                self._close_err = err
            self._rows = None
            self.state = ChunkState.UNOPENED

    def err(self) -> Optional[CursorError]:
        if self._err is not None:
            return self._err
        return self._batch.err()

    def close(self) -> Optional[Exception]:
        """
        Release the current chunk; returns the first release error seen,
        including one from a chunk already drained.
        """
        err = self._batch.close()
        return self._close_err if self._close_err is not None else err

    @property
    def closed(self) -> bool:
        return self._rows is None or self._batch.closed

    def _open(self) -> bool:
        self.chunks += 1
        try:
            rows = self._factory()
            if rows is None:
                raise ValueError("query factory returned no row source")
        except Exception as exc:
            err = FactoryError(self.chunks).with_cause(exc)
            log.warning("Cursor stopped: %s", err, extra={"chunk": self.chunks})
            self._err = err
            return False

        self._rows = rows
        self._batch.reset(rows)
        self.state = ChunkState.FRESH
        log.debug("Opened chunk", extra={"chunk": self.chunks})
        return True


__all__ = ["ChunkState", "ChunkedCursor"]
