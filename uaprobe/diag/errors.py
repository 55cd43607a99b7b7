"""Exception hierarchy for the diagnostic harness."""

from __future__ import annotations


class DiagError(Exception):
    """Base exception for all harness errors"""


class UsageError(DiagError):
    """Raised when the command-line selections conflict or are missing"""


class DecodeError(DiagError, ValueError):
    """Raised when an input line declares a weight that is not a positive integer"""

    def __init__(self, message: str, line: str, line_no: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.line_no = line_no

    def __str__(self) -> str:
        where = f"line {self.line_no}" if self.line_no is not None else "input"
        return f"{where}: {self.args[0]} ({self.line!r})"


class EngineError(DiagError):
    """Raised when the classification engine cannot be configured"""


class EngineOwnershipError(EngineError, RuntimeError):
    """Raised when an engine handle is used outside the thread that owns it"""
