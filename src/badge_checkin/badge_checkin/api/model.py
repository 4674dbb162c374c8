from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_service_timestamp
from ..core.exceptions import TransportError


@dataclass(frozen=True)
class UserRecord:
    """Read-only snapshot of an attendee as returned by one query."""

    id: str
    name: str
    email: str
    applied: bool
    accepted: bool
    confirmed: bool
    confirmation_branch: Optional[str] = None
    application_type: Optional[str] = None
    confirmation_type: Optional[str] = None
    questions: Mapping[str, Optional[str]] = field(default_factory=dict)

    @property
    def can_check_in(self) -> bool:
        return self.accepted and self.confirmed

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "UserRecord":
        try:
            return cls(
                id=str(data["id"]),
                name=data.get("name") or "",
                email=data.get("email") or "",
                applied=bool(data.get("applied")),
                accepted=bool(data.get("accepted")),
                confirmed=bool(data.get("confirmed")),
                confirmation_branch=data.get("confirmationBranch"),
                application_type=(data.get("application") or {}).get("type"),
                confirmation_type=(data.get("confirmation") or {}).get("type"),
                questions=_answers(data.get("questions") or []),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise TransportError(f"Malformed user in response: {exc!r}") from exc


@dataclass(frozen=True)
class TagState:
    """Check-in status of one user at one tag."""

    name: str
    checked_in: bool
    checkin_success: bool
    last_checked_in_at: Optional[datetime] = None
    last_checked_in_by: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TagState":
        try:
            last = data.get("last_successful_checkin") or {}
            return cls(
                name=str(data["tag"]["name"]),
                checked_in=bool(data["checked_in"]),
                checkin_success=bool(data.get("checkin_success")),
                last_checked_in_at=parse_service_timestamp(last.get("checked_in_date")),
                last_checked_in_by=last.get("checked_in_by"),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise TransportError(f"Malformed tag state in response: {exc!r}") from exc


@dataclass(frozen=True)
class UserTags:
    """A user together with their state at every tag."""

    user: UserRecord
    tags: tuple[TagState, ...] = ()

    def tag(self, name: str) -> Optional[TagState]:
        for state in self.tags:
            if state.name == name:
                return state
        return None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "UserTags":
        if not isinstance(data, Mapping) or not isinstance(data.get("user"), Mapping):
            raise TransportError("Malformed response: expected user and tags")
        return cls(
            user=UserRecord.from_json(data["user"]),
            tags=tuple(TagState.from_json(t) for t in data.get("tags") or []),
        )


def _answers(questions) -> dict[str, Optional[str]]:
    answers: dict[str, Optional[str]] = {}
    for q in questions:
        value = q.get("value")
        if value is None and q.get("values"):
            value = ", ".join(q["values"])
        answers[q["name"]] = value
    return answers
