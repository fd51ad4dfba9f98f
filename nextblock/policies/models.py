"""Data models for blocking policies."""

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class TimeWindow:
    """Defines the daily window when restrictions apply.

    Attributes:
        start: Start of the window (exclusive)
        end: End of the window (exclusive). If earlier than start, the
            window runs overnight into the next day.
    """

    start: time  # 09:00
    end: time  # 17:00

    @property
    def is_overnight(self) -> bool:
        return self.end < self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"
