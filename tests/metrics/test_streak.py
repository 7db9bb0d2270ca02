"""Tests for the completion streak."""

from datetime import date, timedelta

from kaamyab.metrics.streak import (
    StreakLog,
    current_streak,
    has_completed_on,
    other_completion_on,
    record_completion,
    revoke_completion,
)

TODAY = date(2025, 3, 12)


def _log(*days_ago: int) -> StreakLog:
    return StreakLog(dates=tuple(TODAY - timedelta(days=n) for n in days_ago))


def test_recording_same_day_twice_adds_one_entry():
    log = record_completion(StreakLog(), TODAY)
    again = record_completion(log, TODAY)

    assert again is log
    assert again.dates == (TODAY,)
    assert current_streak(again, TODAY) == 1


def test_streak_counts_back_from_today():
    assert current_streak(_log(0, 1, 2, 4), TODAY) == 3


def test_streak_counts_from_yesterday_when_today_is_empty():
    assert current_streak(_log(1, 2), TODAY) == 2


def test_streak_breaks_on_gap():
    assert current_streak(_log(2, 3), TODAY) == 0
    assert current_streak(StreakLog(), TODAY) == 0


def test_log_is_sorted_and_unique():
    log = StreakLog(dates=(TODAY, TODAY - timedelta(days=3), TODAY))
    assert log.dates == (TODAY - timedelta(days=3), TODAY)


def test_revoke_completion():
    log = _log(0, 1)
    assert revoke_completion(log, TODAY).dates == (TODAY - timedelta(days=1),)
    assert revoke_completion(log, TODAY - timedelta(days=7)) is log


def test_has_completed_on():
    assert has_completed_on(_log(0), TODAY)
    assert not has_completed_on(_log(1), TODAY)


def test_other_completion_on(make_plan, now):
    plan = make_plan(
        [
            {"title": "a", "execution_state": "done", "completed_at": now.isoformat()},
            {"title": "b", "execution_state": "done", "completed_at": (now - timedelta(days=1)).isoformat()},
        ]
    )
    assert other_completion_on(plan, now.date(), now)
    assert not other_completion_on(plan, now.date() - timedelta(days=2), now)
