"""
Error taxonomy for dbcursor.

Cursors never raise these from `next()`. A failure is recorded as the cursor's
terminal error and surfaced through `err()`; the original exception is kept
as `__cause__`.
"""

from __future__ import annotations

from typing import Optional


class CursorError(Exception):
    """Base class for every error recorded or raised by a cursor."""

    def with_cause(self, cause: Optional[BaseException]) -> "CursorError":
        self.__cause__ = cause
        return self


class DecodeError(CursorError):
    """The record decoder failed on a specific row."""

    def __init__(self, row_number: int, message: str = "") -> None:
        self.row_number = row_number
        super().__init__(message or f"failed to decode row {row_number}")


class SourceError(CursorError):
    """The row source reported a fault during or after iteration."""


class TransformError(CursorError):
    """The batch transform failed on an otherwise valid batch."""

    def __init__(self, batch_size: int, message: str = "") -> None:
        self.batch_size = batch_size
        super().__init__(message or f"failed to transform batch of {batch_size} records")


class FactoryError(CursorError):
    """The query factory failed to open the next chunk."""

    def __init__(self, chunk: int, message: str = "") -> None:
        self.chunk = chunk
        super().__init__(message or f"failed to open chunk {chunk}")


class NoCurrentRowError(CursorError):
    """`scan()` was called while the row source is not positioned on a row."""


__all__ = [
    "CursorError",
    "DecodeError",
    "SourceError",
    "TransformError",
    "FactoryError",
    "NoCurrentRowError",
]
