"""
Abstract cursor interfaces and collaborator contracts for dbcursor.

Concrete cursors (simple, batch, chunked) subclass AbstractCursor and share
the same four-operation surface:

    record()  -> the record at the current position, or None
    next()    -> advance; False on end of stream or after a terminal error
    err()     -> the terminal error, if any
    close()   -> release the underlying row source; returns the release error

Errors are recorded, never raised by `next()`. Callers check `err()` once the
loop ends:

    with new_cursor(rows, scan) as cur:
        while cur.next():
            handle(cur.record())
        if cur.err() is not None:
            raise cur.err()
"""

from __future__ import annotations

import abc
from types import TracebackType
from typing import (
    Any,
    Callable,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Type,
    runtime_checkable,
)

from dbcursor.errors import CursorError, SourceError
from dbcursor.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class RowScanner(Protocol):
    """
    Minimal row accessor handed to a record decoder.
    """

    def scan(self) -> Sequence[Any]:
        """
        Return the values of the current row in column order.

        Raises
        ------
        NoCurrentRowError
            If the source is not positioned on a row.
        """
        ...


@runtime_checkable
class RowSource(RowScanner, Protocol):
    """
    A live, forward-only result set.

    `advance_row` should not raise: a driver fault ends iteration and is
    reported afterwards by `row_error`.
    """

    def advance_row(self) -> bool:
        ...

    def row_error(self) -> Optional[Exception]:
        ...

    def close(self) -> None:
        ...


# Decodes the current row into one record; failures are raised.
ScanFunc = Callable[[RowScanner], Any]

# Enriches a completed, non-empty batch in place; failures are raised.
TransformFunc = Callable[[List[Any]], None]

# Opens the next chunk; usually closes over a caller-maintained watermark.
QueryFactory = Callable[[], RowSource]


@runtime_checkable
class Cursor(Protocol):
    """
    Common interface all cursors expose.
    """

    def record(self) -> Any:
        ...

    def next(self) -> bool:
        ...

    def err(self) -> Optional[CursorError]:
        ...

    def close(self) -> Optional[Exception]:
        ...


class ClosingGuard:
    """
    Releases a row source at most once.

    Later `close()` calls are no-ops, so a source without its own idempotent
    close is still safe to release from any cursor state.
    """

    def __init__(self, rows: Optional[RowSource]) -> None:
        self._rows = rows
        self.closed = rows is None

    def close(self) -> Optional[Exception]:
        if self.closed:
            return None
        self.closed = True
        try:
            self._rows.close()  # type: ignore[union-attr]
        except Exception as exc:
            log.warning("Failed to close row source: %s", exc)
            return SourceError(f"close failed: {exc}").with_cause(exc)
        return None


def advance(rows: RowSource) -> bool:
    """
    Step a row source, converting a raised driver error into a SourceError.
    """
    try:
        return rows.advance_row()
    except Exception as exc:
        raise SourceError(f"row source failed while advancing: {exc}") from exc


def source_error(rows: RowSource) -> Optional[SourceError]:
    """
    Return the source's own terminal error wrapped as a SourceError.
    """
    err = rows.row_error()
    if err is None:
        return None
    if isinstance(err, SourceError):
        return err
    return SourceError(str(err) or type(err).__name__).with_cause(err)


class AbstractCursor(abc.ABC):
    """
    Base class for class-based cursors.

    Subclasses implement the four cursor operations; this class adds the
    iterator and context manager protocols on top of them.
    """

    @abc.abstractmethod
    def record(self) -> Any:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def next(self) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def err(self) -> Optional[CursorError]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> Optional[Exception]:  # pragma: no cover - interface only
        raise NotImplementedError

    def __iter__(self) -> Iterator[Any]:
        """
        Yield the remaining records; stops silently on a terminal error.
        """
        while self.next():
            yield self.record()

    def records(self) -> List[Any]:
        """
        Drain the remaining records, raising the terminal error if one occurred.
        """
        out = list(self)
        err = self.err()
        if err is not None:
            raise err
        return out

    def __enter__(self) -> "AbstractCursor":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


__all__ = [
    "RowScanner",
    "RowSource",
    "ScanFunc",
    "TransformFunc",
    "QueryFactory",
    "Cursor",
    "ClosingGuard",
    "AbstractCursor",
    "advance",
    "source_error",
]
