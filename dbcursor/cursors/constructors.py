"""
Constructors for the cursor family.

`open_cursor` picks the implementation from what it is given: a row source
becomes a SimpleCursor (or a BatchCursor when batching or a transform is
requested), a zero-argument query factory becomes a ChunkedCursor.
"""

from __future__ import annotations

from typing import Optional, Union

from dbcursor.config import get_settings
from dbcursor.cursors.abstract import (
    AbstractCursor,
    QueryFactory,
    RowSource,
    ScanFunc,
    TransformFunc,
)
from dbcursor.cursors.batch import BatchCursor
from dbcursor.cursors.chunked import ChunkedCursor
from dbcursor.cursors.simple import SimpleCursor


def new_cursor(rows: RowSource, scan: ScanFunc) -> SimpleCursor:
    """Wrap `rows` in a record-at-a-time cursor."""
    return SimpleCursor(rows, scan)


def new_batch_cursor(
    rows: RowSource,
    scan: ScanFunc,
    transform: Optional[TransformFunc] = None,
    batch_size: Optional[int] = None,
) -> BatchCursor:
    """
    Wrap `rows` in a batching cursor.

    `batch_size` defaults to `Settings.batch_size`; pass 0 or a negative
    number to read the whole source as one batch.
    """
    if batch_size is None:
        batch_size = get_settings().batch_size
    return BatchCursor(rows, batch_size, scan, transform)


def new_chunked_cursor(
    factory: QueryFactory,
    scan: ScanFunc,
    transform: Optional[TransformFunc] = None,
) -> ChunkedCursor:
    """Iterate over successive result sets opened by `factory`."""
    return ChunkedCursor(factory, scan, transform)


def open_cursor(
    source: Union[RowSource, QueryFactory],
    scan: ScanFunc,
    *,
    batch_size: Optional[int] = None,
    transform: Optional[TransformFunc] = None,
) -> AbstractCursor:
    """
    Build the cursor matching `source` and the requested options.

    Raises
    ------
    ValueError
        If `batch_size` is given together with a query factory; chunks are
        always consumed as a single batch.
    TypeError
        If `source` is neither a row source nor a callable.
    """
    if isinstance(source, RowSource):
        if batch_size is None and transform is None:
            return new_cursor(source, scan)
        return new_batch_cursor(source, scan, transform, batch_size)

    if callable(source):
        if batch_size is not None:
            raise ValueError("batch_size cannot be combined with a query factory")
        return new_chunked_cursor(source, scan, transform)

    raise TypeError(f"expected a row source or query factory, got {type(source).__name__}")


__all__ = ["new_cursor", "new_batch_cursor", "new_chunked_cursor", "open_cursor"]
