from __future__ import annotations

from typing import Sequence


class CheckinError(Exception):
    """Base exception for everything that can end a scan."""


class MalformedTag(CheckinError):
    """Raised when badge memory does not hold a usable NDEF record."""


class InvalidParameters(CheckinError):
    """Raised when an operation is built with invalid input (before any I/O)."""


class UnknownUser(CheckinError):
    """Raised when the service has no user for the badge identifier."""


class CheckInRejected(CheckinError):
    """Raised when the service (or local policy) declines a check-in."""

    def __init__(self, message: str, *, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class TransportError(CheckinError):
    """Raised on network or protocol failures talking to the service."""

    def __init__(self, message: str, *, errors: Sequence[str] = ()):
        super().__init__(message)
        self.errors = list(errors)


class Timeout(CheckinError):
    """Raised when a reader or transport call exceeds its timeout."""


class Cancelled(CheckinError):
    """Raised when the caller cancels a scan in progress."""


class ReaderError(CheckinError):
    """Raised when the NFC reader hardware fails."""
