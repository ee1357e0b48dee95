"""Tests for humanized travel durations."""

import pytest

from tripsync.scheduling.durations import humanize_minutes, parse_travel_minutes


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0, "0 min"),
        (None, "0 min"),
        (-5, "0 min"),
        (45, "45 min"),
        (60, "1 hr"),
        (120, "2 hr"),
        (90, "1 hr 30 min"),
        (135, "2 hr 15 min"),
    ],
)
def test_humanize_minutes(minutes: int | None, expected: str) -> None:
    """Test minutes are formatted as hours and minutes."""
    assert humanize_minutes(minutes) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("45 min", 45),
        ("2 hr", 120),
        ("1 hr 30 min", 90),
        ("1h30m", 90),
        ("2 hours", 120),
        ("25", 25),
        ("  15 mins ", 15),
    ],
)
def test_parse_travel_minutes(text: str, expected: int) -> None:
    """Test stored travel times are parsed back into minutes."""
    assert parse_travel_minutes(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "soon", "about an hour"])
def test_parse_travel_minutes_unrecognized_is_zero(text: str | None) -> None:
    """Test empty or unparseable travel time counts as zero."""
    assert parse_travel_minutes(text) == 0


def test_humanized_values_parse_back() -> None:
    """Test the display format is readable by the parser."""
    for minutes in (5, 59, 60, 61, 180, 605):
        assert parse_travel_minutes(humanize_minutes(minutes)) == minutes
