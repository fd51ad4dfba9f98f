"""notify-send desktop notifier.

The daemon runs as root, so the notification is sent from inside the
target user's login shell with that user's display and session bus.
"""

import logging
import pwd
import shlex
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, target_user: str, title: str, body: str) -> bool:
        """Deliver one message to the user's desktop. Returns True if sent."""
        ...


@dataclass
class DesktopConfig:
    """Configuration for the desktop notifier."""
    display: str = ":0"
    timeout: float = 10.0
    notify_command: str = "notify-send"


class DesktopNotifier:
    """Best-effort notify-send notifier run as the target user."""

    def __init__(
        self,
        config: Optional[DesktopConfig] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.config = config or DesktopConfig()
        self._run = runner

    def _session_bus(self, target_user: str) -> Optional[str]:
        try:
            uid = pwd.getpwnam(target_user).pw_uid
        except KeyError:
            return None
        return f"unix:path=/run/user/{uid}/bus"

    def build_command(self, target_user: str, title: str, body: str) -> list[str]:
        """Build the su invocation that runs notify-send as the user."""
        env = [f"DISPLAY={self.config.display}"]
        bus = self._session_bus(target_user)
        if bus:
            env.append(f"DBUS_SESSION_BUS_ADDRESS={bus}")

        inner = " ".join(
            ["env", *env, self.config.notify_command, shlex.quote(title), shlex.quote(body)]
        )
        return ["su", "-", target_user, "-c", inner]

    def notify(self, target_user: str, title: str, body: str) -> bool:
        """Send notification. Returns True if notify-send exited cleanly."""
        command = self.build_command(target_user, title, body)

        try:
            result = self._run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Notification to {target_user} timed out")
            return False
        except OSError as e:
            logger.warning(f"Notification to {target_user} failed: {e}")
            return False

        if result.returncode != 0:
            logger.warning(
                f"Notification to {target_user} failed: {result.returncode} - {result.stderr.strip()}"
            )
            return False

        logger.debug(f"Notification sent to {target_user}: {title}")
        return True
