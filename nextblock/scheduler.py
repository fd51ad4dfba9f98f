"""Poll loop driving enforcement and denylist reconciliation.

Each tick re-reads the config file, evaluates the blocked window, kills
blocked apps and pushes the denylist state. Ticks never overlap, and every
error raised inside a tick is logged and contained so the loop keeps going.
"""

import asyncio
import logging
import signal
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from nextblock.config import (
    DEFAULT_POLL_INTERVAL,
    ConfigSnapshot,
    config_fingerprint,
    load_snapshot,
)
from nextblock.enforcement import ProcessEnforcer, ProcessInspector
from nextblock.errors import ConfigError, ConfigMissing, CredentialsMissing, RemoteRequestFailed
from nextblock.eventlog import EventLog
from nextblock.models import DenylistResponse, EnforcementEvent, RunningProcess
from nextblock.nextdns import DenylistReconciler
from nextblock.policies import is_blocked

logger = logging.getLogger(__name__)


@dataclass
class LoopState:
    """State carried from one tick to the next."""

    last_fingerprint: Optional[str] = None
    ticks: int = 0
    poll_interval: int = DEFAULT_POLL_INTERVAL


@dataclass
class TickReport:
    """What a single tick saw and did."""

    snapshot: Optional[ConfigSnapshot] = None
    blocked: bool = False
    config_changed: bool = False
    events: list[EnforcementEvent] = field(default_factory=list)
    response: Optional[DenylistResponse] = None


class PollScheduler:
    """Runs enforcement ticks at the configured poll interval."""

    def __init__(
        self,
        config_path: Path,
        enforcer: ProcessEnforcer,
        inspector: ProcessInspector,
        reconciler: DenylistReconciler,
        event_log: Optional[EventLog] = None,
        clock: Callable[[], datetime] = datetime.now,
        interval_override: Optional[int] = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config_path: Config file re-read on every tick
            enforcer: Kills blocked apps
            inspector: Source of process table snapshots
            reconciler: Pushes denylist state to NextDNS
            event_log: Log file sink to re-point when log_file changes
            clock: Wall-clock source
            interval_override: Poll interval that takes precedence over config
        """
        self.config_path = config_path
        self.enforcer = enforcer
        self.inspector = inspector
        self.reconciler = reconciler
        self.event_log = event_log
        self.clock = clock
        self.interval_override = interval_override

    async def tick(self, state: LoopState) -> TickReport:
        """Run one enforcement pass.

        Args:
            state: Loop state, updated in place

        Returns:
            TickReport describing the pass
        """
        report = TickReport()
        state.ticks += 1

        try:
            fingerprint = config_fingerprint(self.config_path)
        except ConfigMissing as e:
            logger.error(f"{e}. Skipping enforcement.")
            return report

        snapshot = None
        try:
            snapshot = load_snapshot(self.config_path)
        except ConfigError as e:
            load_error = e
        else:
            fingerprint = snapshot.fingerprint
            if self.event_log is not None:
                self.event_log.attach(snapshot.log_path)

        if fingerprint != state.last_fingerprint:
            logger.info(f"Configuration change detected. New checksum: {fingerprint}")
            state.last_fingerprint = fingerprint
            report.config_changed = True

        if snapshot is None:
            logger.error(f"{load_error}. Skipping enforcement.")
            return report

        report.snapshot = snapshot
        state.poll_interval = snapshot.poll_interval
        report.blocked = is_blocked(self.clock(), snapshot.blocked_window)

        # psutil scans, kills and notify-send block; keep the loop free for signals
        report.events = await asyncio.to_thread(self._enforce_apps, report.blocked, snapshot)
        report.response = await self._reconcile_sites(report.blocked, snapshot)
        return report

    def _enforce_apps(self, blocked: bool, snapshot: ConfigSnapshot) -> list[EnforcementEvent]:
        processes: list[RunningProcess] = []
        try:
            if blocked and snapshot.blocked_apps:
                processes = self.inspector.snapshot()
            return self.enforcer.enforce(
                blocked,
                snapshot.blocked_apps,
                processes,
                snapshot.target_user,
            )
        except Exception as e:
            logger.error(f"Process enforcement failed: {e}")
            return []

    async def _reconcile_sites(self, blocked: bool, snapshot: ConfigSnapshot) -> Optional[DenylistResponse]:
        try:
            return await self.reconciler.reconcile(
                blocked,
                snapshot.blocked_sites,
                snapshot.credentials,
            )
        except CredentialsMissing as e:
            logger.warning(str(e))
        except RemoteRequestFailed as e:
            logger.error(str(e))
        except Exception as e:
            logger.error(f"Denylist reconciliation failed: {e}")
        return None

    def interval(self, state: LoopState) -> int:
        if self.interval_override is not None:
            return self.interval_override
        return state.poll_interval

    async def run_forever(
        self,
        stop_event: asyncio.Event,
        state: Optional[LoopState] = None,
        max_ticks: Optional[int] = None,
    ) -> LoopState:
        """Run ticks until stop_event is set.

        A stop request aborts the current sleep immediately. If it arrives
        mid-tick, the tick (including any in-flight HTTP call) is cancelled.

        Args:
            stop_event: Set by the signal handlers to request shutdown
            state: Initial loop state (fresh state if None)
            max_ticks: Stop after this many ticks (None = forever)

        Returns:
            Final loop state
        """
        state = state or LoopState()

        while not stop_event.is_set():
            tick_task = asyncio.create_task(self.tick(state))
            stop_task = asyncio.create_task(stop_event.wait())
            done, _pending = await asyncio.wait(
                {tick_task, stop_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if tick_task not in done:
                tick_task.cancel()
                try:
                    await tick_task
                except asyncio.CancelledError:
                    pass
                logger.info("Shutdown requested during tick, tick aborted")
                break

            stop_task.cancel()
            try:
                await stop_task
            except asyncio.CancelledError:
                pass

            if max_ticks is not None and state.ticks >= max_ticks:
                break

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval(state))
            except asyncio.TimeoutError:
                pass

        return state


def install_signal_handlers(stop_event: asyncio.Event) -> Callable[[], None]:
    """Set stop_event on SIGINT/SIGTERM.

    Returns:
        Callable that removes the handlers again
    """
    loop = asyncio.get_running_loop()

    def signal_handler() -> None:
        logger.info("Shutdown signal received")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Signal handlers not supported on this platform (e.g., Windows)
            pass

    def remove() -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, ValueError):
                pass

    return remove
