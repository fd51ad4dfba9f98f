"""Command-line interface for nextblock."""

import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from nextblock.config import ConfigSnapshot, find_config_file, get_config_search_paths, load_snapshot
from nextblock.enforcement import (
    ProcessEnforcer,
    PsutilProcessInspector,
    PsutilProcessTerminator,
)
from nextblock.errors import ConfigError
from nextblock.eventlog import EventLog
from nextblock.nextdns import DenylistReconciler, NextDNSClient
from nextblock.notifiers import DesktopNotifier
from nextblock.policies import window_status
from nextblock.scheduler import LoopState, PollScheduler, install_signal_handlers

logger = logging.getLogger("nextblock")

console = Console()


def _load_or_exit(config_path: Path | None) -> tuple[Path, ConfigSnapshot]:
    """Load the config at startup; any problem is fatal (exit 1)."""
    if config_path is None:
        searched = ", ".join(str(p) for p in get_config_search_paths())
        console.print(f"[red]No configuration file found (searched: {searched})[/red]")
        sys.exit(1)

    try:
        return config_path, load_snapshot(config_path)
    except ConfigError as e:
        console.print(f"[red]{e}. Exiting.[/red]")
        sys.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config file (default: searches standard locations)",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None) -> None:
    """nextblock - block apps and websites during a daily time window."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config or find_config_file()


@main.command()
@click.option("--interval", type=click.IntRange(min=1), default=None, help="Poll interval in seconds (default: from config, 10)")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Override the log_file setting")
@click.option("--once", is_flag=True, help="Run a single enforcement tick and exit")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def run(
    ctx: click.Context,
    interval: int | None,
    log_file: Path | None,
    once: bool,
    verbose: bool,
) -> None:
    """Run the enforcement daemon.

    Re-reads the config file every poll interval, kills blocked apps during
    the blocked window and keeps the NextDNS denylist in sync.

    Example:
        sudo nextblock -c /etc/nextblock/blocker_config.toml run
    """
    config_path, snapshot = _load_or_exit(ctx.obj["config_path"])

    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    event_log = EventLog()
    event_log.attach(log_file or snapshot.log_path)

    client = NextDNSClient()
    scheduler = PollScheduler(
        config_path=config_path,
        enforcer=ProcessEnforcer(PsutilProcessTerminator(), DesktopNotifier()),
        inspector=PsutilProcessInspector(),
        reconciler=DenylistReconciler(client),
        # A pinned --log-file is never re-pointed by config edits
        event_log=None if log_file else event_log,
        interval_override=interval,
    )

    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print(f"[cyan]Blocked window: {snapshot.blocked_window}[/cyan]")
    console.print(
        f"[cyan]{len(snapshot.blocked_apps)} blocked apps, "
        f"{len(snapshot.blocked_sites)} blocked websites[/cyan]"
    )
    if not snapshot.target_user:
        console.print("[yellow]No target_user configured: notifications disabled[/yellow]")
    if snapshot.blocked_sites and not snapshot.credentials.is_complete:
        console.print("[yellow]NextDNS credentials incomplete: denylist sync disabled[/yellow]")
    console.print(f"[dim]Logging to {event_log.path}[/dim]")
    if not once:
        console.print("[dim]Press Ctrl+C to stop[/dim]")

    async def run_daemon() -> LoopState:
        stop_event = asyncio.Event()
        remove_handlers = install_signal_handlers(stop_event)
        logger.info("Starting NextDNS Blocker Service...")
        try:
            return await scheduler.run_forever(stop_event, max_ticks=1 if once else None)
        finally:
            remove_handlers()
            await client.close()

    try:
        state = asyncio.run(run_daemon())
    except KeyboardInterrupt:
        state = None

    logger.info("NextDNS Blocker Service stopped")
    event_log.close()
    if state is not None:
        console.print(f"[green]Stopped after {state.ticks} ticks[/green]")


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the config file and show what it enforces."""
    config_path, snapshot = _load_or_exit(ctx.obj["config_path"])

    table = Table(title=f"Configuration: {config_path}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    credentials = snapshot.credentials
    api_key = "*" * 8 if credentials.api_key else "[yellow]not set[/yellow]"

    table.add_row("Blocked window", str(snapshot.blocked_window))
    table.add_row("Blocked apps", ", ".join(sorted(snapshot.blocked_apps)) or "[dim]none[/dim]")
    table.add_row("Blocked websites", ", ".join(sorted(snapshot.blocked_sites)) or "[dim]none[/dim]")
    table.add_row("Target user", snapshot.target_user or "[yellow]not set[/yellow]")
    table.add_row("NextDNS profile", credentials.profile_id or "[yellow]not set[/yellow]")
    table.add_row("NextDNS API key", api_key)
    table.add_row("Log file", str(snapshot.log_path))
    table.add_row("Poll interval", f"{snapshot.poll_interval}s")
    table.add_row("Checksum", snapshot.fingerprint[:16])

    console.print(table)
    console.print("[green]Configuration is valid[/green]")


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show whether the blocked window is active right now."""
    config_path, snapshot = _load_or_exit(ctx.obj["config_path"])

    now = datetime.now()
    current = window_status(now, snapshot.blocked_window)

    if current.blocked:
        console.print(f"[red]BLOCKED[/red] (window {snapshot.blocked_window})")
    else:
        console.print(f"[green]OPEN[/green] (window {snapshot.blocked_window})")
    if current.next_change:
        verb = "opens" if current.blocked else "blocks"
        console.print(f"  Next change: {verb} at {current.next_change.strftime('%Y-%m-%d %H:%M')}")

    if not snapshot.blocked_apps:
        return

    processes = PsutilProcessInspector().snapshot()
    running = sorted(
        app for app in snapshot.blocked_apps if any(p.matches(app) for p in processes)
    )
    if running:
        console.print(f"[yellow]Blocked apps running now: {', '.join(running)}[/yellow]")
    else:
        console.print("[dim]No blocked apps running[/dim]")


if __name__ == "__main__":
    main()
