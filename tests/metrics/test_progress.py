"""Tests for plan progress and time read models."""

import pytest

from kaamyab.metrics.progress import (
    calculate_plan_progress,
    calculate_total_time_spent,
    calculate_week_progress,
    get_completion_insight,
)
from kaamyab.plans.types import ExecutionState, Task

DONE = {"title": "done", "execution_state": "done", "completed_at": "2025-03-10T09:00:00+05:00"}


def test_progress_of_empty_plan_is_zero(make_plan):
    progress = calculate_plan_progress(make_plan([]))
    assert (progress.completed, progress.total, progress.percent) == (0, 0, 0)
    assert calculate_plan_progress(None).percent == 0


def test_progress_rounds_half_up(make_plan):
    # 1 of 8 = 12.5%
    progress = calculate_plan_progress(make_plan([DONE, "b", "c", "d"], ["e", "f", "g", "h"]))
    assert progress.percent == 13


def test_progress_is_100_only_when_all_done(make_plan):
    assert calculate_plan_progress(make_plan([DONE], [DONE])).percent == 100
    almost = make_plan([DONE] * 199 + ["last"])
    assert calculate_plan_progress(almost).percent < 100


def test_week_progress(make_plan):
    plan = make_plan([DONE, "b", "c"])
    progress = calculate_week_progress(plan.weeks[0])
    assert (progress.completed, progress.total, progress.percent) == (1, 3, 33)


def test_total_time_spent(make_plan):
    plan = make_plan([{"title": "a", "time_spent_seconds": 60}], [{"title": "b", "time_spent_seconds": 90}])
    assert calculate_total_time_spent(plan) == 150


@pytest.mark.parametrize(
    ("seconds", "kind"),
    [(1800, "fast"), (3600, "normal"), (4320, "normal"), (5000, "slow")],
)
def test_completion_insight(seconds, kind):
    task = Task(title="t", estimated_hours=1, execution_state=ExecutionState.DONE, time_spent_seconds=seconds)
    assert get_completion_insight(task).kind == kind


def test_no_insight_for_untimed_or_open_tasks():
    assert get_completion_insight(Task(title="t", time_spent_seconds=100)) is None
    assert get_completion_insight(Task(title="t", execution_state=ExecutionState.DONE)) is None
