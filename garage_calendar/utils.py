"""Shared utilities used across the garage calendar."""

import re
from datetime import datetime
from typing import Optional, Union

_TRAILING_INT = re.compile(r"(\d+)\s*$")


def bay_number(bay_id: Optional[Union[str, int]]) -> Optional[int]:
    """Extract the trailing bay number from a composite bay id.

    Examples:
        >>> bay_number("garage42-bay-3")
        3
        >>> bay_number("bay7")
        7
        >>> bay_number("front") is None
        True
    """
    if bay_id is None:
        return None
    match = _TRAILING_INT.search(str(bay_id))
    if not match:
        return None
    return int(match.group(1))


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``.

    The wall-clock fields are kept as given; no timezone conversion is done.
    """
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes from midnight."""
    hour, minute = value.strip().split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes from midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("07700 900 123")
        '07700900123'
        >>> normalize_phone("+44 (7700) 900-123")
        '+447700900123'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)
