"""
Cursors package for dbcursor.

This module re-exports the collaborator contracts, the concrete cursor
classes and their constructors so downstream code can import from
`dbcursor.cursors` directly.
"""

from dbcursor.cursors.abstract import (
    AbstractCursor,
    ClosingGuard,
    Cursor,
    QueryFactory,
    RowScanner,
    RowSource,
    ScanFunc,
    TransformFunc,
)
from dbcursor.cursors.batch import BatchCursor
from dbcursor.cursors.chunked import ChunkedCursor, ChunkState
from dbcursor.cursors.constructors import (
    new_batch_cursor,
    new_chunked_cursor,
    new_cursor,
    open_cursor,
)
from dbcursor.cursors.simple import SimpleCursor

__all__ = [
    # Contracts
    "AbstractCursor",
    "ClosingGuard",
    "Cursor",
    "QueryFactory",
    "RowScanner",
    "RowSource",
    "ScanFunc",
    "TransformFunc",
    # Concrete cursors
    "BatchCursor",
    "ChunkedCursor",
    "ChunkState",
    "SimpleCursor",
    # Constructors
    "new_batch_cursor",
    "new_chunked_cursor",
    "new_cursor",
    "open_cursor",
]
