from __future__ import annotations

from datetime import datetime
from typing import Optional


def parse_service_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the check-in service.

    Returns None for empty or unparseable values; a bad timestamp must not
    turn a successful check-in into a failure.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
