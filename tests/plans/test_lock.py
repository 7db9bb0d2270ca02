"""Tests for week lock state."""

from kaamyab.plans.lock import (
    WeekLockState,
    get_active_week_index,
    get_lock_states,
    get_locked_week_indices,
    get_week_lock_state,
    is_week_locked,
)

DONE = {"title": "done task", "execution_state": "done", "completed_at": "2025-03-10T09:00:00+05:00"}


def test_first_incomplete_week_is_active(make_plan):
    plan = make_plan([DONE], ["b"], ["c"])

    assert get_active_week_index(plan) == 1
    assert get_lock_states(plan) == [WeekLockState.PAST, WeekLockState.ACTIVE, WeekLockState.LOCKED]
    assert is_week_locked(plan, 2)
    assert not is_week_locked(plan, 0)


def test_nothing_locked_when_all_weeks_complete(make_plan):
    plan = make_plan([DONE], [DONE])
    assert get_active_week_index(plan) is None
    assert get_locked_week_indices(plan) == set()
    assert get_week_lock_state(plan, 1) == WeekLockState.PAST


def test_empty_week_counts_as_complete(make_plan):
    plan = make_plan([], ["b"], ["c"])
    assert get_active_week_index(plan) == 1


def test_locked_set_only_shrinks_as_tasks_complete(make_plan):
    before = make_plan(["a"], ["b"], ["c"])
    after = make_plan([DONE], ["b"], ["c"])

    assert get_locked_week_indices(after) <= get_locked_week_indices(before)
    assert get_locked_week_indices(after) == {2}
