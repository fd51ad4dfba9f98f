"""Notifiers package for telling the desktop user about blocked apps."""

from nextblock.notifiers.desktop import DesktopConfig, DesktopNotifier, Notifier

__all__ = ["DesktopConfig", "DesktopNotifier", "Notifier"]
