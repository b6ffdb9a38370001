"""Time utilities.

Keep small and dependency-free.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime


def now_ms() -> int:
    """Return current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_dt(ms: int) -> datetime:
    """Convert epoch milliseconds into an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000.0, tz=UTC)
