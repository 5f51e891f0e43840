"""
Database connection helpers for dbcursor.

Opens dedicated psycopg connections from settings. Pooling and retrying are
left to the application; a cursor only ever owns the result sets it is
handed.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection

from dbcursor.config import Settings, get_settings


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Open a dedicated synchronous connection.

    Parameters
    ----------
    dsn : str, optional
        Connection string; defaults to the one built from settings.

    Returns
    -------
    Connection
        A new psycopg connection instance. Close it when done.
    """
    return psycopg.connect(dsn or build_dsn())


__all__ = ["build_dsn", "get_sync_connection"]
