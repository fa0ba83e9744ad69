"""Codec error types.

Two failure classes, with different recovery policies:

- RecordParseError: one bad CSV line. Recovered by the caller, counted,
  and skipped; never aborts a load.
- CodecFatalError: the whole operation cannot proceed (unreadable file,
  malformed binary or JSON frame, value that cannot be encoded). Always
  raised to the caller.
"""

from typing import Optional

__all__ = ['RecordParseError', 'CodecFatalError']


class RecordParseError(ValueError):
    """A single registry record could not be parsed."""

    def __init__(self, reason: str, line: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        super().__init__(reason)

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}: {self.reason}"
        return self.reason


class CodecFatalError(RuntimeError):
    """A registry encode/decode call failed as a whole."""
    pass
