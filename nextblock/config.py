"""Configuration loading for nextblock.

Loads the blocking policy from a TOML or JSON config file. The file is
re-read on every poll tick; each load produces an independent, immutable
ConfigSnapshot or fails as a whole.
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli

from nextblock.errors import ConfigInvalid, ConfigMissing
from nextblock.policies.models import TimeWindow
from nextblock.policies.time_window import parse_time_of_day

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("/var/log/blocker.log")
DEFAULT_POLL_INTERVAL = 10


def get_config_search_paths() -> list[Path]:
    """Get list of paths to search for config file."""
    return [
        Path("blocker_config.toml"),  # Current directory
        Path("blocker_config.json"),
        Path.home() / ".config" / "nextblock" / "blocker_config.toml",
        Path("/etc/nextblock/blocker_config.toml"),
        Path("/root/blocker_config.json"),
    ]


def find_config_file() -> Optional[Path]:
    """Find the first existing config file."""
    for path in get_config_search_paths():
        if path.exists():
            return path
    return None


@dataclass(frozen=True)
class NextDNSCredentials:
    """NextDNS profile and API key. Either may be absent."""

    profile_id: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.profile_id) and bool(self.api_key)


@dataclass(frozen=True)
class ConfigSnapshot:
    """Validated configuration as read at one poll tick.

    Attributes:
        blocked_window: Daily window when apps and sites are blocked
        blocked_apps: Process names to kill during the window
        blocked_sites: Domains to activate on the NextDNS denylist
        credentials: NextDNS profile ID and API key
        target_user: Desktop user to notify (None disables notifications)
        log_path: Append-only event log file
        poll_interval: Seconds between ticks
        source: Path the snapshot was loaded from
        fingerprint: SHA-256 of the raw file contents
    """

    blocked_window: TimeWindow
    blocked_apps: frozenset[str] = frozenset()
    blocked_sites: frozenset[str] = frozenset()
    credentials: NextDNSCredentials = NextDNSCredentials()
    target_user: Optional[str] = None
    log_path: Path = DEFAULT_LOG_PATH
    poll_interval: int = DEFAULT_POLL_INTERVAL
    source: Optional[Path] = None
    fingerprint: str = ""


def config_fingerprint(config_path: Path) -> str:
    """Return the SHA-256 hex digest of the config file.

    Raises:
        ConfigMissing: If the file does not exist
    """
    try:
        return hashlib.sha256(config_path.read_bytes()).hexdigest()
    except FileNotFoundError:
        raise ConfigMissing(f"Configuration file {config_path} does not exist") from None


def _parse_document(config_path: Path, raw: bytes) -> dict[str, Any]:
    """Parse raw bytes as TOML or JSON depending on the file suffix."""
    try:
        if config_path.suffix == ".toml":
            data = tomli.loads(raw.decode("utf-8"))
        else:
            data = json.loads(raw)
    except (tomli.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigInvalid(f"Configuration file {config_path} could not be parsed: {e}") from e

    if not isinstance(data, dict):
        raise ConfigInvalid(f"Configuration file {config_path} must contain a mapping")
    return data


def _optional_str(data: dict[str, Any], key: str, section: str = "") -> Optional[str]:
    """Read an optional string; null and blank values count as absent."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        name = f"{section}.{key}" if section else key
        raise ConfigInvalid(f"'{name}' must be a string")
    value = value.strip()
    return value or None


def _string_set(data: dict[str, Any], key: str, lower: bool = False) -> frozenset[str]:
    """Read an optional list of strings, dropping blank entries."""
    value = data.get(key)
    if value is None:
        return frozenset()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigInvalid(f"'{key}' must be a list of strings")

    items = (v.strip() for v in value)
    if lower:
        items = (v.lower() for v in items)
    return frozenset(v for v in items if v)


def _parse_window(data: dict[str, Any]) -> TimeWindow:
    blocked_time = data.get("blocked_time")
    if not isinstance(blocked_time, dict):
        raise ConfigInvalid("'blocked_time' section is required")

    bounds = {}
    for key in ("start", "end"):
        value = blocked_time.get(key)
        if not isinstance(value, str):
            raise ConfigInvalid(f"'blocked_time.{key}' is required (HH:MM)")
        try:
            bounds[key] = parse_time_of_day(value)
        except ValueError as e:
            raise ConfigInvalid(f"'blocked_time.{key}': {e}") from e

    return TimeWindow(start=bounds["start"], end=bounds["end"])


def parse_snapshot(data: dict[str, Any], source: Optional[Path] = None, fingerprint: str = "") -> ConfigSnapshot:
    """Validate a parsed config document into a ConfigSnapshot.

    Raises:
        ConfigInvalid: If required fields are missing or any field is malformed
    """
    window = _parse_window(data)

    nextdns = data.get("nextdns")
    if nextdns is None:
        nextdns = {}
    if not isinstance(nextdns, dict):
        raise ConfigInvalid("'nextdns' must be a table/object")
    credentials = NextDNSCredentials(
        profile_id=_optional_str(nextdns, "profile_id", "nextdns"),
        api_key=_optional_str(nextdns, "api_key", "nextdns"),
    )

    log_file = _optional_str(data, "log_file")
    log_path = Path(log_file).expanduser() if log_file else DEFAULT_LOG_PATH

    poll_interval = data.get("poll_interval", DEFAULT_POLL_INTERVAL)
    # bool is an int subclass; reject it explicitly
    if isinstance(poll_interval, bool) or not isinstance(poll_interval, int) or poll_interval <= 0:
        raise ConfigInvalid("'poll_interval' must be a positive integer")

    return ConfigSnapshot(
        blocked_window=window,
        blocked_apps=_string_set(data, "blocked_apps"),
        blocked_sites=_string_set(data, "blocked_websites", lower=True),
        credentials=credentials,
        target_user=_optional_str(data, "target_user"),
        log_path=log_path,
        poll_interval=poll_interval,
        source=source,
        fingerprint=fingerprint,
    )


def load_snapshot(config_path: Path) -> ConfigSnapshot:
    """Load and validate the configuration file.

    Args:
        config_path: Path to a .toml or .json config file

    Returns:
        Fully validated ConfigSnapshot

    Raises:
        ConfigMissing: If the file does not exist
        ConfigInvalid: If the file cannot be read, parsed or validated
    """
    try:
        raw = config_path.read_bytes()
    except FileNotFoundError:
        raise ConfigMissing(f"Configuration file {config_path} does not exist") from None
    except OSError as e:
        raise ConfigInvalid(f"Configuration file {config_path} could not be read: {e}") from e

    data = _parse_document(config_path, raw)
    snapshot = parse_snapshot(
        data,
        source=config_path,
        fingerprint=hashlib.sha256(raw).hexdigest(),
    )
    logger.debug(
        f"Loaded config from {config_path}: window {snapshot.blocked_window}, "
        f"{len(snapshot.blocked_apps)} apps, {len(snapshot.blocked_sites)} sites"
    )
    return snapshot
