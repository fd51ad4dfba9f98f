"""nextblock - time-window application and website blocker daemon."""

__version__ = "0.1.0"
