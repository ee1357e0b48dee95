"""Humanized travel durations ("1 hr 30 min")."""

import re

_DURATION_RE = re.compile(
    r"^\s*(?:(?P<hours>\d+)\s*(?:hr|hrs|hour|hours|h))?\s*"
    r"(?:(?P<minutes>\d+)\s*(?:min|mins|minute|minutes|m))?\s*$",
    re.IGNORECASE,
)


def humanize_minutes(minutes: int | None) -> str:
    """Format minutes for display.

    Examples:
        0 -> "0 min", 45 -> "45 min", 120 -> "2 hr", 90 -> "1 hr 30 min"
    """
    if not minutes or minutes <= 0:
        return "0 min"

    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours} hr {rest} min"
    if hours:
        return f"{hours} hr"
    return f"{rest} min"


def parse_travel_minutes(text: str | None) -> int:
    """Parse a stored travel time back into minutes.

    Accepts humanized values and bare integers (minutes). Empty or
    unrecognized text counts as zero.
    """
    if text is None:
        return 0

    value = text.strip()
    if not value:
        return 0
    if value.isdigit():
        return int(value)

    match = _DURATION_RE.match(value)
    if match is None or not (match.group("hours") or match.group("minutes")):
        return 0
    return int(match.group("hours") or 0) * 60 + int(match.group("minutes") or 0)
