"""
DB-API 2.0 adapters for the row source contract.

Any PEP 249 cursor (sqlite3, psycopg, ...) can back a cursor through
`DBAPIRowSource`. `query` and `query_factory` are the usual entry points:

    rows = query(conn, "SELECT id, title FROM posts ORDER BY id")
    cur = new_batch_cursor(rows, scan_post, batch_size=200)

For psycopg connections, passing `name=` opens a server-side cursor so the
result set is streamed rather than materialized on the client.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, List, Mapping, Optional, Sequence, Tuple, Union

from dbcursor.cursors.abstract import QueryFactory
from dbcursor.errors import NoCurrentRowError
from dbcursor.utils.logging import get_logger

log = get_logger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]


class DBAPIRowSource:
    """
    Adapts a DB-API cursor that has already executed a query.

    Rows are pulled with `fetchmany(fetch_size)`. A driver exception raised
    while fetching ends iteration; it is kept and reported by `row_error`.
    """

    def __init__(self, cursor: Any, fetch_size: int = 1) -> None:
        self._cursor = cursor
        self.fetch_size = max(1, fetch_size)
        self._buffer: Deque[Any] = deque()
        self._row: Any = None
        self._has_row = False
        self._exhausted = False
        self._err: Optional[Exception] = None

    @property
    def columns(self) -> List[str]:
        """Column names of the result set, in order."""
        description = self._cursor.description or ()
        return [col[0] for col in description]

    def advance_row(self) -> bool:
        self._has_row = False
        self._row = None
        if self._exhausted or self._err is not None:
            return False

        if not self._buffer:
            try:
                fetched = self._cursor.fetchmany(self.fetch_size)
            except Exception as exc:
                log.debug("Fetch failed: %s", exc)
                self._err = exc
                return False
            if not fetched:
                self._exhausted = True
                return False
            self._buffer.extend(fetched)

        self._row = self._buffer.popleft()
        self._has_row = True
        return True

    def scan(self) -> Tuple[Any, ...]:
        if not self._has_row:
            raise NoCurrentRowError("row source is not positioned on a row")
        if isinstance(self._row, Mapping):
            return tuple(self._row.values())
        return tuple(self._row)

    def row_error(self) -> Optional[Exception]:
        return self._err

    def close(self) -> None:
        self._buffer.clear()
        self._has_row = False
        self._cursor.close()


def query(
    conn: Any,
    sql: Any,
    params: Optional[Params] = None,
    *,
    fetch_size: int = 1,
    name: Optional[str] = None,
) -> DBAPIRowSource:
    """
    Execute `sql` on a new cursor of `conn` and wrap it as a row source.

    Parameters
    ----------
    conn : DB-API connection
        Connection to execute on. Transactions are the caller's concern.
    sql : str or psycopg.sql.Composable
        Query text using the driver's placeholder style.
    params : sequence or mapping, optional
        Query parameters.
    fetch_size : int
        Rows pulled per `fetchmany` round trip.
    name : str, optional
        Server-side cursor name (psycopg only).
    """
    cursor = conn.cursor(name=name) if name is not None else conn.cursor()
    try:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)
    except Exception:
        cursor.close()
        raise
    return DBAPIRowSource(cursor, fetch_size=fetch_size)


def query_factory(
    conn: Any,
    sql: Any,
    params: Union[Params, Callable[[], Params], None] = None,
    *,
    fetch_size: int = 1,
    name: Optional[str] = None,
) -> QueryFactory:
    """
    Build a query factory that re-runs `sql` for every chunk.

    When `params` is callable it is evaluated on each call, which is how a
    watermark (e.g. the last seen primary key) reaches the next page query.
    """

    def factory() -> DBAPIRowSource:
        args = params() if callable(params) else params
        return query(conn, sql, args, fetch_size=fetch_size, name=name)

    return factory


__all__ = ["DBAPIRowSource", "query", "query_factory"]
