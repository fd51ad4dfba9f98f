"""Shared fakes and fixtures for nextblock tests."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from nextblock.errors import ProcessKillFailed
from nextblock.models import RunningProcess

# ---------------------------------------------------------------------------
# Capability fakes
# ---------------------------------------------------------------------------


class FakeInspector:
    """Returns a fixed process table."""

    def __init__(self, processes: list[RunningProcess] | None = None) -> None:
        self.processes = processes or []
        self.calls = 0

    def snapshot(self) -> list[RunningProcess]:
        self.calls += 1
        return list(self.processes)


class FakeTerminator:
    """Records terminate calls; PIDs in ``fail_pids`` raise ProcessKillFailed."""

    def __init__(self, fail_pids: set[int] | None = None) -> None:
        self.fail_pids = fail_pids or set()
        self.killed: list[int] = []

    def terminate(self, process: RunningProcess, app_name: str) -> None:
        if process.pid in self.fail_pids:
            raise ProcessKillFailed(app_name, process.pid, "permission denied")
        self.killed.append(process.pid)


class FakeNotifier:
    """Records notifications instead of running notify-send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def notify(self, target_user: str, title: str, body: str) -> bool:
        self.sent.append((target_user, title, body))
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def base_config(tmp_path: Path, **overrides: Any) -> dict[str, Any]:
    """A valid JSON config document with the log file inside tmp_path."""
    data: dict[str, Any] = {
        "log_file": str(tmp_path / "blocker.log"),
        "blocked_time": {"start": "09:00", "end": "17:00"},
        "blocked_apps": ["steam"],
        "blocked_websites": ["example.com"],
        "target_user": "alice",
        "nextdns": {"profile_id": "abc123", "api_key": "secret-key"},
    }
    data.update(overrides)
    return data


@pytest.fixture()
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write a JSON config file into tmp_path and return its path."""

    def _write(data: dict[str, Any] | None = None, name: str = "blocker_config.json", **overrides: Any) -> Path:
        path = tmp_path / name
        document = data if data is not None else base_config(tmp_path, **overrides)
        path.write_text(json.dumps(document))
        return path

    return _write
