"""Typed failures raised by the translation client.

Two exception families leave this package:

- :class:`OllamaError`: the server could not produce a translation.  It
  always carries an :class:`ErrorKind`.
- :class:`TranslationCancelled`: the caller asked us to stop.  It is not a
  subclass of :class:`OllamaError`, so ``except OllamaError`` never catches
  a cancel.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure taxonomy attached to every :class:`OllamaError`."""

    CONNECTION_FAILED = "CONNECTION_FAILED"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    GENERATION_FAILED = "GENERATION_FAILED"


class OllamaError(RuntimeError):
    """A single translation call failed.

    Args:
        message: Human-readable description.  When derived from a server
            response body the body text is embedded verbatim.
        kind: Which of the three failure classes this is.
    """

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __repr__(self) -> str:
        return f"OllamaError({self.message!r}, kind={self.kind.value})"


class TranslationCancelled(Exception):
    """Raised when a :class:`CancellationToken` fires during a call or batch."""

    def __init__(self, reason: str = "Translation cancelled") -> None:
        super().__init__(reason)
        self.reason = reason
