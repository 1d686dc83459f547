"""Exceptions for pathglob."""

from __future__ import annotations


class PatternCompileError(ValueError):
    """Raised when a glob pattern cannot be compiled.

    Always raised before any filesystem access takes place.

    Attributes:
        reason: Short description of what is wrong.
        pattern: The offending pattern (or path portion).
        position: 0-based index of the offending character within
            *pattern*, or ``None`` when no single character is to blame.
    """

    def __init__(self, reason: str, pattern: str = "", position: int | None = None):
        msg = reason
        if position is not None:
            msg += f" at position {position}"
        if pattern:
            msg += f" in {pattern!r}"
        super().__init__(msg)
        self.reason = reason
        self.pattern = pattern
        self.position = position


class InvalidInputError(ValueError):
    """Raised when :func:`~pathglob.glob` is called with an empty pattern."""
