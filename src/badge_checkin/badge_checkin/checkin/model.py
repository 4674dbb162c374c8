from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..api.model import TagState, UserRecord
from ..core.enums import ScanOutcome, ScanState
from ..core.exceptions import CheckinError
from ..ndef.model import BadgeIdentifier


@dataclass(frozen=True)
class CheckInRequest:
    """One check-in/out a scan is about to submit. Never resubmitted."""

    badge: BadgeIdentifier
    user_id: str
    tag: str
    checkin: bool


@dataclass(frozen=True)
class ScanResult:
    outcome: ScanOutcome
    state: ScanState
    history: tuple[ScanState, ...]
    request: Optional[CheckInRequest] = None
    badge: Optional[BadgeIdentifier] = None
    user: Optional[UserRecord] = None
    tag_state: Optional[TagState] = None
    error: Optional[CheckinError] = None
    # True once the mutation left this process; it may have been applied
    # even if the scan then failed or was cancelled.
    mutation_sent: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome in (ScanOutcome.COMPLETED, ScanOutcome.ALREADY_IN_STATE)

    @property
    def error_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def message(self) -> str:
        who = self.user.name if self.user and self.user.name else (str(self.badge) if self.badge else "Badge")
        tag = self.request.tag if self.request else ""
        checkin = self.request.checkin if self.request else True

        if self.outcome == ScanOutcome.COMPLETED:
            return f"{who} checked in to {tag}" if checkin else f"{who} checked out of {tag}"
        if self.outcome == ScanOutcome.ALREADY_IN_STATE:
            return f"{who} is already checked in to {tag}" if checkin else f"{who} is already checked out of {tag}"
        if self.outcome == ScanOutcome.CANCELLED:
            return "Scan cancelled after the check-in was sent" if self.mutation_sent else "Scan cancelled"
        return str(self.error) if self.error is not None else "Scan failed"
