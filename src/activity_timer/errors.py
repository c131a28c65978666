"""Error types for the activity timer.

Lookups that find nothing and stopping with no active activity are not
errors; those return ``None``.
"""

from __future__ import annotations


class TimerError(Exception):
    """Base exception for activity timer errors."""


class InvalidArgumentError(TimerError, ValueError):
    """Raised for malformed input, such as an update without an id."""


class PersistenceError(TimerError):
    """Raised when the store rejects a write or cannot be read."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


__all__ = [
    "InvalidArgumentError",
    "PersistenceError",
    "TimerError",
]
