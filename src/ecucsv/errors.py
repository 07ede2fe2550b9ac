"""
Exception types raised while converting ECU files.

Every failure a single file can hit is one of these. The orchestrator
catches ConversionError and turns it into a FileOutcome, so one bad file
never stops a batch.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for all per-file conversion failures."""
    pass


class ConversionIOError(ConversionError):
    """Raised when an input file cannot be read or an output file cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MalformedXmlError(ConversionError):
    """Raised when the input is not well-formed XML or breaks the label layout."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
        self.line = line
        self.column = column


class CorruptContainerError(ConversionError):
    """Raised when a .cmp container cannot be decoded back to its CSV payload."""
    pass


class MissingTrailerError(CorruptContainerError):
    """Raised when a container has no NUL byte, so its size is unknown."""
    pass


__all__ = [
    "ConversionError",
    "ConversionIOError",
    "MalformedXmlError",
    "CorruptContainerError",
    "MissingTrailerError",
]
