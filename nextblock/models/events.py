"""Event and value types passed between the enforcement components."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class EnforcementAction(str, Enum):
    """Outcome of acting on a detected blocked application."""

    KILLED = "killed"
    KILL_FAILED = "kill-failed"


@dataclass(frozen=True)
class RunningProcess:
    """One entry of the process table as seen at scan time."""

    pid: int
    name: str
    exe_name: Optional[str] = None
    # Start time as reported by the OS; identifies the process across PID reuse
    create_time: Optional[float] = None

    def matches(self, app_name: str) -> bool:
        """Check if this process is an instance of the given app name."""
        wanted = app_name.lower()
        if self.name.lower() == wanted:
            return True
        return self.exe_name is not None and self.exe_name.lower() == wanted


@dataclass(frozen=True)
class EnforcementEvent:
    """A blocked application detected running during the blocked window.

    Attributes:
        app_name: Configured app name that matched
        timestamp: When the violation was detected
        action: Whether every matching process was terminated
        pids: PIDs of all matching processes
        error: First termination error, if any
    """

    app_name: str
    timestamp: datetime
    action: EnforcementAction
    pids: tuple[int, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class DenylistEntry:
    """Desired state of one domain on the remote denylist."""

    id: str
    active: bool

    def to_dict(self) -> dict:
        return {"id": self.id, "active": self.active}


@dataclass(frozen=True)
class DenylistResponse:
    """Reply from the NextDNS API for a denylist update."""

    method: str
    status_code: int
    body: str = ""
    entries: tuple[DenylistEntry, ...] = field(default=())
