from __future__ import annotations

from typing import Optional


class InterpreterError(Exception):
    """Base class for every failure raised while compiling or running a program."""


class ParseError(InterpreterError):
    """Raised when loop delimiters in the source are unbalanced."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Error parsing source: `{self.message}`"


class PointerOverflow(InterpreterError):
    def __str__(self) -> str:
        return "Pointer is out of memory bounds"


class MemoryOverflow(InterpreterError):
    def __str__(self) -> str:
        return "Memory overflow"


class StdinError(InterpreterError):
    """Raised when the input source fails with an I/O error (not on end of input)."""

    def __init__(self, cause: Optional[OSError] = None) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Error reading from stdin: `{self.cause}`"


class StepLimitExceeded(InterpreterError):
    """Raised when execution exceeds the configured step budget."""


__all__ = [
    "InterpreterError",
    "MemoryOverflow",
    "ParseError",
    "PointerOverflow",
    "StdinError",
    "StepLimitExceeded",
]
