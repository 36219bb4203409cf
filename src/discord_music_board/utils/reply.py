"""Helpers for parsing command arguments and formatting chat replies."""

from __future__ import annotations

import re
from functools import cache

_UNIT_TIMESTAMP = re.compile(r"(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?", re.IGNORECASE)


def parse_timestamp(value: str) -> int | None:
    """Parse a timestamp string into total seconds.

    Accepts "90", "1:30", "1:30:00" and the unit form "1h2m3s" / "2m30s" / "45s".
    Returns None if the input is invalid.
    """
    value = value.strip()
    if not value:
        return None

    if ":" not in value and not value.isdigit():
        match = _UNIT_TIMESTAMP.fullmatch(value)
        if match is None or not any(match.groups()):
            return None
        hours, minutes, seconds = (int(group or 0) for group in match.groups())
        return hours * 3600 + minutes * 60 + seconds

    parts = value.split(":")
    if len(parts) > 3:
        return None

    try:
        int_parts = [int(p) for p in parts]
    except ValueError:
        return None

    if any(p < 0 for p in int_parts):
        return None

    if len(int_parts) == 1:
        return int_parts[0]
    if len(int_parts) == 2:
        return int_parts[0] * 60 + int_parts[1]
    return int_parts[0] * 3600 + int_parts[1] * 60 + int_parts[2]


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
