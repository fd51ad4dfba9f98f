"""Tests for the psutil-backed process terminator."""

import psutil
import pytest

from nextblock.enforcement import PsutilProcessTerminator
from nextblock.enforcement import processes as processes_module
from nextblock.errors import ProcessKillFailed
from nextblock.models import RunningProcess

STARTED_AT = 1_700_000_000.25


class FakePsutilProcess:
    """Stands in for psutil.Process; records terminate calls."""

    instances: list["FakePsutilProcess"] = []
    create_time_value = STARTED_AT
    error: Exception | None = None

    def __init__(self, pid: int) -> None:
        if self.error is not None:
            raise self.error
        self.pid = pid
        self.terminated = False
        FakePsutilProcess.instances.append(self)

    def create_time(self) -> float:
        return self.create_time_value

    def terminate(self) -> None:
        self.terminated = True


@pytest.fixture()
def fake_process(monkeypatch: pytest.MonkeyPatch) -> type[FakePsutilProcess]:
    FakePsutilProcess.instances = []
    FakePsutilProcess.create_time_value = STARTED_AT
    FakePsutilProcess.error = None
    monkeypatch.setattr(processes_module.psutil, "Process", FakePsutilProcess)
    return FakePsutilProcess


def test_terminates_same_process(fake_process: type[FakePsutilProcess]) -> None:
    process = RunningProcess(pid=4242, name="steam", create_time=STARTED_AT)

    PsutilProcessTerminator().terminate(process, "steam")

    assert [p.terminated for p in fake_process.instances] == [True]


def test_recycled_pid_not_signalled(fake_process: type[FakePsutilProcess]) -> None:
    """A PID now held by a later process is left alone."""
    fake_process.create_time_value = STARTED_AT + 30
    process = RunningProcess(pid=4242, name="steam", create_time=STARTED_AT)

    with pytest.raises(ProcessKillFailed, match="PID reused") as exc_info:
        PsutilProcessTerminator().terminate(process, "steam")

    assert exc_info.value.pid == 4242
    assert [p.terminated for p in fake_process.instances] == [False]


def test_unknown_start_time_still_terminates(fake_process: type[FakePsutilProcess]) -> None:
    process = RunningProcess(pid=4242, name="steam")

    PsutilProcessTerminator().terminate(process, "steam")

    assert [p.terminated for p in fake_process.instances] == [True]


@pytest.mark.parametrize(
    "error, reason",
    [
        (psutil.NoSuchProcess(4242), "process already exited"),
        (psutil.AccessDenied(4242), "permission denied"),
    ],
)
def test_psutil_errors_become_kill_failures(
    fake_process: type[FakePsutilProcess], error: Exception, reason: str
) -> None:
    fake_process.error = error
    process = RunningProcess(pid=4242, name="steam", create_time=STARTED_AT)

    with pytest.raises(ProcessKillFailed) as exc_info:
        PsutilProcessTerminator().terminate(process, "steam")

    assert exc_info.value.reason == reason
