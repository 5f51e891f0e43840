"""
Ready-made record decoders.

A decoder receives the row scanner and returns one record. Any exception it
raises is recorded by the cursor as a DecodeError.

    class Post(BaseModel):
        id: int
        title: str

    scan_post = model_decoder(Post, ["id", "title"])
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel

from dbcursor.cursors.abstract import RowScanner

ModelT = TypeVar("ModelT", bound=BaseModel)


def tuple_decoder(rs: RowScanner) -> Tuple[Any, ...]:
    """Return the current row as a plain tuple."""
    return tuple(rs.scan())


def model_decoder(model: Type[ModelT], fields: Sequence[str]) -> Callable[[RowScanner], ModelT]:
    """
    Build a decoder validating each row into a pydantic model.

    Parameters
    ----------
    model : type of BaseModel
        Target model class.
    fields : sequence of str
        Field names matching the selected columns, in column order.

    Raises
    ------
    ValueError
        From the returned decoder, when the row width differs from `fields`.
    pydantic.ValidationError
        From the returned decoder, when a value does not validate.
    """
    names = tuple(fields)

    def decode(rs: RowScanner) -> ModelT:
        values = rs.scan()
        if len(values) != len(names):
            raise ValueError(f"expected {len(names)} columns, got {len(values)}")
        return model.model_validate(dict(zip(names, values)))

    return decode


__all__ = ["tuple_decoder", "model_decoder"]
