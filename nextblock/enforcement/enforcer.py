"""Kills blocked applications during the blocked window and notifies the user."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Optional

from nextblock.enforcement.processes import ProcessTerminator
from nextblock.errors import ProcessKillFailed, TargetUserMissing
from nextblock.models import EnforcementAction, EnforcementEvent, RunningProcess
from nextblock.notifiers.desktop import Notifier

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Blocked Application"


class ProcessEnforcer:
    """Detects and terminates blocked applications.

    For each blocked app name, while blocked:
    1. Find every running process matching the name
    2. Log the attempt
    3. Terminate all matches, recording failures instead of raising
    4. Emit one EnforcementEvent for the app
    5. Notify the target user
    """

    def __init__(
        self,
        terminator: ProcessTerminator,
        notifier: Notifier,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize enforcer.

        Args:
            terminator: Capability used to kill processes
            notifier: Capability used to reach the desktop user
            clock: Source of event timestamps
        """
        self.terminator = terminator
        self.notifier = notifier
        self.clock = clock

    def enforce(
        self,
        blocked: bool,
        blocked_apps: Iterable[str],
        processes: list[RunningProcess],
        target_user: Optional[str] = None,
    ) -> list[EnforcementEvent]:
        """Enforce the blocked app list against a process table snapshot.

        Args:
            blocked: Whether the blocked window is active
            blocked_apps: Configured app names
            processes: Process table snapshot
            target_user: Desktop user to notify, if any

        Returns:
            One event per blocked app found running (empty when not blocked)
        """
        if not blocked:
            return []

        events = []
        for app_name in sorted(blocked_apps):
            matches = [p for p in processes if p.matches(app_name)]
            if not matches:
                continue

            logger.info(f"User attempted to open '{app_name}' during blocked time.")
            event = self._terminate_all(app_name, matches)
            events.append(event)

            if event.action is EnforcementAction.KILLED:
                logger.info(f"Killed '{app_name}'.")
            else:
                logger.warning(f"Failed to kill '{app_name}': {event.error}")

            try:
                self._notify(target_user, app_name)
            except TargetUserMissing as e:
                logger.warning(str(e))

        return events

    def _terminate_all(self, app_name: str, matches: list[RunningProcess]) -> EnforcementEvent:
        """Terminate every matching process; the first failure is recorded."""
        error = None
        for process in matches:
            try:
                self.terminator.terminate(process, app_name)
            except ProcessKillFailed as e:
                logger.debug(str(e))
                if error is None:
                    error = e.reason

        return EnforcementEvent(
            app_name=app_name,
            timestamp=self.clock(),
            action=EnforcementAction.KILLED if error is None else EnforcementAction.KILL_FAILED,
            pids=tuple(p.pid for p in matches),
            error=error,
        )

    def _notify(self, target_user: Optional[str], app_name: str) -> bool:
        if not target_user:
            raise TargetUserMissing("Target user not configured.")
        return self.notifier.notify(
            target_user,
            NOTIFICATION_TITLE,
            f"You attempted to open '{app_name}'. It has been closed.",
        )
