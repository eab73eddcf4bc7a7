"""Terminal to-do list with a reminder daemon."""

__version__ = "0.3.0"
