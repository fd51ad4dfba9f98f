"""Process table access behind small capability interfaces.

The enforcer only sees RunningProcess values and the two protocols below,
so tests can substitute fakes for the psutil-backed implementations.
"""

import logging
import os
from typing import Protocol

import psutil

from nextblock.errors import ProcessKillFailed
from nextblock.models import RunningProcess

logger = logging.getLogger(__name__)


class ProcessInspector(Protocol):
    def snapshot(self) -> list[RunningProcess]:
        """Return the current process table."""
        ...


class ProcessTerminator(Protocol):
    def terminate(self, process: RunningProcess, app_name: str) -> None:
        """Terminate one process.

        Raises:
            ProcessKillFailed: If the process could not be signalled
        """
        ...


class PsutilProcessInspector:
    """Reads the process table with psutil."""

    def snapshot(self) -> list[RunningProcess]:
        processes = []
        for proc in psutil.process_iter(["name", "exe", "create_time"]):
            try:
                name = proc.info["name"] or ""
                exe = proc.info["exe"]
                create_time = proc.info["create_time"]
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            processes.append(
                RunningProcess(
                    pid=proc.pid,
                    name=name,
                    exe_name=os.path.basename(exe) if exe else None,
                    create_time=create_time,
                )
            )
        return processes


class PsutilProcessTerminator:
    """Sends SIGTERM to processes via psutil.

    The PID is re-checked against the start time seen at scan time, so a PID
    recycled since the scan is never signalled.
    """

    def terminate(self, process: RunningProcess, app_name: str) -> None:
        try:
            proc = psutil.Process(process.pid)
            if process.create_time is not None and proc.create_time() != process.create_time:
                raise ProcessKillFailed(app_name, process.pid, "PID reused by another process")
            proc.terminate()
        except psutil.NoSuchProcess:
            raise ProcessKillFailed(app_name, process.pid, "process already exited") from None
        except psutil.AccessDenied:
            raise ProcessKillFailed(app_name, process.pid, "permission denied") from None
        logger.debug(f"Sent SIGTERM to {process.name} (PID {process.pid})")
