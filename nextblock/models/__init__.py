"""Data models for nextblock events."""

from nextblock.models.events import (
    DenylistEntry,
    DenylistResponse,
    EnforcementAction,
    EnforcementEvent,
    RunningProcess,
)

__all__ = [
    "DenylistEntry",
    "DenylistResponse",
    "EnforcementAction",
    "EnforcementEvent",
    "RunningProcess",
]
