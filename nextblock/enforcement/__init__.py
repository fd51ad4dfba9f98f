"""Blocked application detection and termination."""

from nextblock.enforcement.enforcer import ProcessEnforcer
from nextblock.enforcement.processes import (
    ProcessInspector,
    ProcessTerminator,
    PsutilProcessInspector,
    PsutilProcessTerminator,
)

__all__ = [
    "ProcessEnforcer",
    "ProcessInspector",
    "ProcessTerminator",
    "PsutilProcessInspector",
    "PsutilProcessTerminator",
]
