"""
Pytest configuration for dbcursor.

Provides fixtures for:
- In-memory fake row sources for state machine tests
- A seeded sqlite3 posts/comments database (1234 posts)
- Postgres connection management for integration tests
"""

from __future__ import annotations

import os
import sqlite3
from typing import Any, Callable, Generator, Iterable, List, Optional

import psycopg
import pytest
from pydantic import BaseModel, Field

from dbcursor import get_settings, model_decoder, new_cursor, query
from dbcursor.config import Settings
from scripts.seed_posts import _create_schema, _seed

POSTS = 1234


class Comment(BaseModel):
    id: int
    post_id: int
    message: str


class Post(BaseModel):
    id: int
    title: str
    comments: List[Comment] = Field(default_factory=list)


scan_post = model_decoder(Post, ["id", "title"])
scan_comment = model_decoder(Comment, ["id", "post_id", "message"])


class FakeRows:
    """
    Scripted row source yielding one single-column row per value.

    error_after: number of rows served before the source faults; the fault
    is then reported by row_error().
    """

    def __init__(
        self,
        values: Iterable[Any],
        error: Optional[Exception] = None,
        error_after: Optional[int] = None,
        close_error: Optional[Exception] = None,
    ) -> None:
        self.values = list(values)
        self.pos = -1
        self.error = error
        self.error_after = len(self.values) if error_after is None else error_after
        self.close_error = close_error
        self.close_calls = 0
        self.exhausted = False

    def advance_row(self) -> bool:
        if self.exhausted or self.pos + 1 >= min(len(self.values), self.error_after):
            self.exhausted = True
            return False
        self.pos += 1
        return True

    def scan(self) -> tuple:
        return (self.values[self.pos],)

    def row_error(self) -> Optional[Exception]:
        return self.error if self.exhausted else None

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


def _scan_value(rs: Any) -> Any:
    return rs.scan()[0]


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_rows() -> Callable[..., FakeRows]:
    return FakeRows


@pytest.fixture
def scan_value() -> Callable[[Any], Any]:
    return _scan_value


@pytest.fixture
def scan_posts() -> Callable[[Any], Post]:
    return scan_post


@pytest.fixture(scope="session")
def posts_db(tmp_path_factory: pytest.TempPathFactory) -> Generator[sqlite3.Connection, None, None]:
    """
    Session-scoped sqlite3 database seeded with the posts/comments fixture.
    """
    path = tmp_path_factory.mktemp("dbcursor") / "test.sqlite3"
    conn = sqlite3.connect(str(path))
    _create_schema(conn)
    _seed(conn, posts=POSTS, placeholder="?")
    try:
        yield conn
    finally:
        conn.close()


def make_comment_transform(conn: Any, placeholder: str = "?") -> Callable[[List[Post]], None]:
    """
    Build a batch transform attaching each post's comments with one IN query.
    """

    def transform(recs: List[Post]) -> None:
        by_id = {post.id: post for post in recs}
        marks = ",".join([placeholder] * len(by_id))
        rows = query(
            conn,
            f"SELECT id, post_id, message FROM comments WHERE post_id IN ({marks}) ORDER BY id",
            list(by_id),
        )
        with new_cursor(rows, scan_comment) as cur:
            for comment in cur:
                by_id[comment.post_id].comments.append(comment)
            if cur.err() is not None:
                raise cur.err()

    return transform


# --------------------------------------------------------------------
# Postgres (integration)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "dbcursor"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped connection with the fixture schema freshly seeded.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        _create_schema(conn, reset=True)
        _seed(conn, posts=POSTS, placeholder="%s")
        yield conn
    finally:
        conn.close()


@pytest.fixture
def comment_transform() -> Callable[..., Callable[[List[Post]], None]]:
    return make_comment_transform
