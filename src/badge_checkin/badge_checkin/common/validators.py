from __future__ import annotations

from ..core.exceptions import InvalidParameters


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidParameters(f"{field_name} must not be empty")
    return value.strip()


def require_positive_int(value: int, field_name: str) -> int:
    # bool is an int subclass; True is not a limit.
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidParameters(f"{field_name} must be a positive integer")
    return value


def require_bool(value: bool, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidParameters(f"{field_name} must be true or false")
    return value
