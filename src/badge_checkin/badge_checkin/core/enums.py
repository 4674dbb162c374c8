from __future__ import annotations

from enum import Enum


class ScanState(str, Enum):
    """States of one scan-to-outcome cycle."""

    IDLE = "IDLE"
    READING = "READING"
    DECODING = "DECODING"
    RESOLVING = "RESOLVING"
    SUBMITTING = "SUBMITTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.FAILED, ScanState.CANCELLED)


class ScanOutcome(str, Enum):
    """What the caller shows the operator after a scan."""

    COMPLETED = "COMPLETED"
    ALREADY_IN_STATE = "ALREADY_IN_STATE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class WellKnownType(str, Enum):
    """NFC Forum well-known record types the decoder understands."""

    TEXT = "T"
    URI = "U"
