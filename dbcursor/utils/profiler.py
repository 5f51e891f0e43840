"""
Profiling helpers for cursor drains.

Measures wall-clock time, CPU usage and resident memory around a block,
and derives throughput from the number of records the block reports:

    with profile_block("scan posts") as stats:
        for rec in cursor:
            stats.rows += 1

    print(stats.rows_per_sec, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    rows: int = 0
    duration_seconds: float = 0.0
    rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def rows_per_sec(self) -> float:
        return self.rows / self.duration_seconds if self.duration_seconds > 0 else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "rows": self.rows,
            "duration_seconds": round(self.duration_seconds, 4),
            "rows_per_sec": round(self.rows_per_sec, 2),
            "rss_bytes": self.rss_bytes,
            "cpu_percent": self.cpu_percent,
            **self.extra,
        }


@contextlib.contextmanager
def profile_block(label: str) -> Generator[ProfileStats, None, None]:
    """
    Profile a block of code.

    CPU percent is measured between entry and exit (psutil needs a priming
    call); RSS is sampled once on exit.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    process.cpu_percent(interval=None)

    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start
        stats.cpu_percent = process.cpu_percent(interval=None)
        stats.rss_bytes = process.memory_info().rss


__all__ = ["ProfileStats", "profile_block"]
