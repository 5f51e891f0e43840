from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

import typer
from psycopg import sql

from dbcursor.config import get_settings
from dbcursor.cursors import AbstractCursor, new_batch_cursor, new_chunked_cursor
from dbcursor.decoders import tuple_decoder
from dbcursor.infrastructure import DBAPIRowSource, get_sync_connection, query
from dbcursor.utils.logging import configure_logging
from dbcursor.utils.profiler import ProfileStats, profile_block

app = typer.Typer(help="Stream query results through dbcursor cursors.")


def _row_dict(rs: DBAPIRowSource) -> Dict[str, Any]:
    return dict(zip(rs.columns, tuple_decoder(rs)))


def _emit(cursor: AbstractCursor, stats: ProfileStats, limit: Optional[int]) -> None:
    for rec in cursor:
        typer.echo(json.dumps(rec, default=str))
        stats.rows += 1
        if limit and stats.rows >= limit:
            break


def _finish(cursor: AbstractCursor, stats: ProfileStats) -> None:
    typer.echo(json.dumps(stats.as_dict()), err=True)
    err = cursor.err()
    if err is not None:
        typer.echo(f"error: {err} ({err.__cause__!r})", err=True)
        raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"batch={settings.batch_size} page={settings.page_size} fetch={settings.fetch_size}"
    )


@app.command()
def scan(
    query_text: str = typer.Option(..., "--query", "-q", help="SELECT statement to stream."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Records per batch (default from settings, <= 0 reads everything at once).",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Stop after N records."),
) -> None:
    """
    Stream a query through a batch cursor and print rows as JSON lines.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    conn = get_sync_connection(dsn)
    try:
        rows = query(conn, query_text, fetch_size=settings.fetch_size, name="dbcursor_scan")
        with new_batch_cursor(rows, _row_dict, batch_size=batch_size) as cursor, profile_block("scan") as stats:
            _emit(cursor, stats, limit)
    finally:
        conn.close()

    _finish(cursor, stats)


@app.command()
def paginate(
    table: str = typer.Option(..., "--table", "-t", help="Table to page through (schema.table allowed)."),
    key: str = typer.Option(..., "--key", "-k", help="Unique, ordered column used as watermark."),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", "-p", help="Rows per page (default from settings)."
    ),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Stop after N records."),
) -> None:
    """
    Keyset-paginate a table through a chunked cursor and print rows as JSON lines.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    size = page_size or settings.page_size

    ident = {"table": sql.Identifier(*table.split(".")), "key": sql.Identifier(key)}
    first_page = sql.SQL("SELECT * FROM {table} ORDER BY {key} LIMIT %s").format(**ident)
    next_page = sql.SQL("SELECT * FROM {table} WHERE {key} > %s ORDER BY {key} LIMIT %s").format(
        **ident
    )

    conn = get_sync_connection(dsn)
    watermark: Any = None

    def open_page() -> DBAPIRowSource:
        if watermark is None:
            return query(conn, first_page, (size,), fetch_size=settings.fetch_size)
        return query(conn, next_page, (watermark, size), fetch_size=settings.fetch_size)

    def track(rs: DBAPIRowSource) -> Dict[str, Any]:
        nonlocal watermark
        rec = _row_dict(rs)
        watermark = rec[key]
        return rec

    try:
        with new_chunked_cursor(open_page, track) as cursor, profile_block("paginate") as stats:
            _emit(cursor, stats, limit)
            stats.extra["pages"] = cursor.chunks
    finally:
        conn.close()

    _finish(cursor, stats)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
