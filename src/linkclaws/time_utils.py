"""Millisecond epoch helpers.

Every persisted timestamp is an integer count of milliseconds since the Unix
epoch (UTC). Jobs accept an explicit ``now`` so tests can pin the clock.
"""

import time
from datetime import datetime, timezone
from typing import Optional

SECOND_MS = 1000
HOUR_MS = 60 * 60 * SECOND_MS
DAY_MS = 24 * HOUR_MS


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def resolve_now(now: Optional[int]) -> int:
    return now_ms() if now is None else now


def days(count: int) -> int:
    """Length of ``count`` days in milliseconds."""
    return count * DAY_MS


def to_iso(value_ms: Optional[int]) -> Optional[str]:
    """Render epoch milliseconds as an ISO-8601 UTC string (``None`` passes through)."""
    if value_ms is None:
        return None
    moment = datetime.fromtimestamp(value_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
