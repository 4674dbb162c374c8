from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import WellKnownType
from ..core.exceptions import MalformedTag


@dataclass(frozen=True)
class BadgeIdentifier:
    """User id decoded from a badge; compared verbatim with the service's id."""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise MalformedTag("Badge identifier is empty")
        object.__setattr__(self, "value", self.value.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TagRecord:
    """A single well-known NDEF record lifted out of tag memory."""

    record_type: WellKnownType
    payload: bytes
