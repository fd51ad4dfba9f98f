"""Time-window blocking policy for nextblock."""

from nextblock.policies.models import TimeWindow
from nextblock.policies.time_window import (
    WindowStatus,
    is_blocked,
    parse_time_of_day,
    window_status,
)

__all__ = [
    "TimeWindow",
    "WindowStatus",
    "is_blocked",
    "parse_time_of_day",
    "window_status",
]
