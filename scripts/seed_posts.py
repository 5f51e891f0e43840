"""
Fixture data script for dbcursor.

Creates the `posts` / `comments` schema used by the examples and tests and
fills it deterministically: posts 1..N titled "Post <i>", and for every post
i the comments 1..(i % 5) - 1 with message "Comment <i>/<j>". Comment ids are
assigned in insertion order, so post 433 always owns comments 518 and 519.

Works on any DB-API connection; pass the driver's placeholder ("?" for
sqlite3, "%s" for psycopg).
"""

from __future__ import annotations

import sys
import time
from typing import Any, Iterator, Tuple

import psycopg
import typer

from dbcursor.infrastructure.db_factory import build_dsn

app = typer.Typer(help="Create and seed the posts/comments fixture schema.")

DEFAULT_POSTS = 1234

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS posts (
      id INTEGER PRIMARY KEY NOT NULL,
      title VARCHAR(255) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
      id INTEGER PRIMARY KEY NOT NULL,
      post_id INTEGER NOT NULL,
      message VARCHAR(255) NOT NULL,
      FOREIGN KEY (post_id) REFERENCES posts(id) ON DELETE CASCADE
    )
    """,
)


def _post_rows(posts: int) -> Iterator[Tuple[int, str]]:
    for i in range(1, posts + 1):
        yield i, f"Post {i}"


def _comment_rows(posts: int) -> Iterator[Tuple[int, int, str]]:
    comment_id = 0
    for i in range(1, posts + 1):
        for j in range(1, i % 5):
            comment_id += 1
            yield comment_id, i, f"Comment {i}/{j}"


def _create_schema(conn: Any, reset: bool = False) -> None:
    cur = conn.cursor()
    try:
        if reset:
            cur.execute("DROP TABLE IF EXISTS comments")
            cur.execute("DROP TABLE IF EXISTS posts")
        for stmt in _SCHEMA:
            cur.execute(stmt)
    finally:
        cur.close()
    conn.commit()


def _seed(conn: Any, posts: int = DEFAULT_POSTS, placeholder: str = "?") -> Tuple[int, int]:
    """
    Insert the fixture rows and commit. Returns (posts, comments) inserted.
    """
    comments = list(_comment_rows(posts))
    cur = conn.cursor()
    try:
        cur.executemany(
            f"INSERT INTO posts (id, title) VALUES ({placeholder}, {placeholder})",
            list(_post_rows(posts)),
        )
        cur.executemany(
            "INSERT INTO comments (id, post_id, message) "
            f"VALUES ({placeholder}, {placeholder}, {placeholder})",
            comments,
        )
    finally:
        cur.close()
    conn.commit()
    return posts, len(comments)


@app.command()
def main(
    posts: int = typer.Option(
        DEFAULT_POSTS,
        "--posts",
        "-n",
        help="Number of posts to generate.",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Drop existing fixture tables first.",
    ),
) -> None:
    """
    Create the fixture schema in Postgres and load posts and comments.
    """
    start = time.perf_counter()
    with psycopg.connect(dsn or build_dsn()) as conn:
        _create_schema(conn, reset=reset)
        n_posts, n_comments = _seed(conn, posts=posts, placeholder="%s")
    typer.echo(
        f"Loaded {n_posts:,} posts and {n_comments:,} comments "
        f"in {time.perf_counter() - start:.2f}s."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
