"""protracker: a small personal task tracker with durable local state."""

__version__ = "0.1.0"
