"""
Utilities package for dbcursor.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of cursor logic.
"""

from dbcursor.utils.logging import configure_logging, get_logger
from dbcursor.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
