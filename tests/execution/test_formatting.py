"""Tests for timer display helpers."""

import pytest

from kaamyab.execution.formatting import format_timer_display, format_total_time, split_hours_minutes


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00"), (59, "00:59"), (754, "12:34"), (3600, "01:00:00"), (5025, "01:23:45"), (-5, "00:00")],
)
def test_format_timer_display(seconds, expected):
    assert format_timer_display(seconds) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(30, "30s"), (45 * 60, "45m"), (2 * 3600 + 15 * 60, "2h 15m"), (3600, "1h 0m")],
)
def test_format_total_time(seconds, expected):
    assert format_total_time(seconds) == expected


def test_split_hours_minutes():
    assert split_hours_minutes(2 * 3600 + 15 * 60 + 59) == (2, 15)
