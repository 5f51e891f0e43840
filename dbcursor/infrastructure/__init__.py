"""
Infrastructure package for dbcursor.

Adapts DB-API drivers to the row source contract and opens connections.
Keep this layer focused on I/O and resource management, decoupled from the
cursor state machines.
"""

from dbcursor.infrastructure.db_factory import build_dsn, get_sync_connection
from dbcursor.infrastructure.row_source import DBAPIRowSource, query, query_factory

__all__ = [
    "build_dsn",
    "get_sync_connection",
    "DBAPIRowSource",
    "query",
    "query_factory",
]
