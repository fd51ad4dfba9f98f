"""Blocked-state evaluation from wall-clock time.

Times are compared at minute resolution: a window of 09:00-17:00 is open
for the whole of the 09:00 and 17:00 minutes and blocked from 09:01 through
16:59. Windows whose end is earlier than their start run across midnight.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from nextblock.policies.models import TimeWindow

# HH:MM, 24-hour
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_time_of_day(value: str) -> time:
    """Parse an HH:MM string into a time.

    Raises:
        ValueError: If the string is not a valid 24-hour HH:MM time
    """
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"invalid time of day {value!r}, expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def _to_minute(now: datetime | time) -> time:
    if isinstance(now, datetime):
        now = now.time()
    return time(now.hour, now.minute)


def is_blocked(now: datetime | time, window: TimeWindow) -> bool:
    """Check if the given wall-clock time falls inside the blocked window.

    Both boundaries are exclusive. An empty window (start == end) never
    blocks.

    Args:
        now: Current time (date part is ignored)
        window: Configured blocked window

    Returns:
        True if restrictions apply right now
    """
    current = _to_minute(now)

    if window.is_empty:
        return False
    if window.is_overnight:
        return current > window.start or current < window.end
    return window.start < current < window.end


@dataclass(frozen=True)
class WindowStatus:
    """Blocked state at a point in time plus when it next flips."""

    blocked: bool
    next_change: Optional[datetime]


def window_status(now: datetime, window: TimeWindow) -> WindowStatus:
    """Compute the blocked state and the next minute at which it changes."""
    blocked = is_blocked(now, window)
    if window.is_empty:
        return WindowStatus(blocked=False, next_change=None)

    # State only changes at minute boundaries; a day of minutes is enough
    minute = now.replace(second=0, microsecond=0)
    for step in range(1, 24 * 60 + 1):
        candidate = minute + timedelta(minutes=step)
        if is_blocked(candidate, window) != blocked:
            return WindowStatus(blocked=blocked, next_change=candidate)
    return WindowStatus(blocked=blocked, next_change=None)
