"""
dbcursor - record and batch cursors over relational result sets.

This package wraps a live result set in a forward-only cursor and offers
three flavours:

- SimpleCursor: one decoded record per advance
- BatchCursor: decodes rows in batches and enriches each batch with a
  caller-supplied transform (e.g. resolving child records in one query)
- ChunkedCursor: splices successive result sets from a query factory into
  one continuous stream (keyset / watermark pagination)

Errors never escape `next()`; they are recorded and reported by `err()`.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from dbcursor.config import Settings, get_settings
from dbcursor.cursors import (
    AbstractCursor,
    BatchCursor,
    ChunkedCursor,
    ChunkState,
    Cursor,
    QueryFactory,
    RowScanner,
    RowSource,
    ScanFunc,
    SimpleCursor,
    TransformFunc,
    new_batch_cursor,
    new_chunked_cursor,
    new_cursor,
    open_cursor,
)
from dbcursor.decoders import model_decoder, tuple_decoder
from dbcursor.errors import (
    CursorError,
    DecodeError,
    FactoryError,
    NoCurrentRowError,
    SourceError,
    TransformError,
)
from dbcursor.infrastructure import DBAPIRowSource, query, query_factory
from dbcursor.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Cursors
    "AbstractCursor",
    "BatchCursor",
    "ChunkedCursor",
    "ChunkState",
    "Cursor",
    "SimpleCursor",
    "new_batch_cursor",
    "new_chunked_cursor",
    "new_cursor",
    "open_cursor",
    # Collaborator contracts
    "QueryFactory",
    "RowScanner",
    "RowSource",
    "ScanFunc",
    "TransformFunc",
    # Decoders
    "model_decoder",
    "tuple_decoder",
    # Errors
    "CursorError",
    "DecodeError",
    "FactoryError",
    "NoCurrentRowError",
    "SourceError",
    "TransformError",
    # DB-API adapters
    "DBAPIRowSource",
    "query",
    "query_factory",
    # Logging
    "configure_logging",
    "get_logger",
]
