"""Per-file detection errors.

Every ``DetectionError`` is local to one file: it ends the current phase for
that file and nothing else. Callers log it and move on to the next event.
"""

from __future__ import annotations


class DetectionError(Exception):
    """Base class for failures of an analysis phase on one file."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"{path}: {reason}" if reason else path
        super().__init__(message)


class FormatUnknownError(DetectionError):
    """The format oracle could not classify the file (unreadable path, I/O error)."""


class ReadFailedError(DetectionError):
    """The file vanished or became unreadable between the event and the read."""


class UnsupportedFormatError(DetectionError):
    """The static phase was asked to inspect a non-ELF file."""


class MalformedBinaryError(DetectionError):
    """The ELF container could not be parsed, or an offset points outside it."""
