"""Exception hierarchy for nextblock.

Only the configuration errors are fatal, and only at startup. Everything
else is raised inside a poll tick and logged at the tick boundary.
"""

from typing import Optional


def one_line(text: str) -> str:
    """Collapse all whitespace runs, including newlines, to single spaces."""
    return " ".join(text.split())


class BlockerError(Exception):
    """Base exception for nextblock."""


class ConfigError(BlockerError):
    """Base for configuration problems."""


class ConfigMissing(ConfigError):
    """Raised when the configuration file does not exist."""


class ConfigInvalid(ConfigError):
    """Raised when the configuration cannot be parsed or fails validation."""


class CredentialsMissing(BlockerError):
    """Raised when NextDNS profile ID or API key is not configured."""


class TargetUserMissing(BlockerError):
    """Raised when a notification is requested but no target user is set."""


class ProcessKillFailed(BlockerError):
    """Raised when a blocked process could not be terminated."""

    def __init__(self, app_name: str, pid: int, reason: str) -> None:
        self.app_name = app_name
        self.pid = pid
        self.reason = reason
        super().__init__(f"Failed to kill '{app_name}' (PID {pid}): {reason}")


class RemoteRequestFailed(BlockerError):
    """Raised when the NextDNS API call fails or returns a non-2xx status."""

    def __init__(
        self,
        method: str,
        status_code: Optional[int] = None,
        body: str = "",
    ) -> None:
        self.method = method
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"NextDNS {method} failed: {one_line(body)}"
        else:
            message = f"NextDNS {method} failed: {status_code} - {one_line(body)}"
        super().__init__(message)
