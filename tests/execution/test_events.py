"""Tests for completion edge detection."""

from kaamyab.execution.events import PlanCompletedEvent, WeekCompletedEvent, detect_completion_edges

DONE = {"title": "done", "execution_state": "done", "completed_at": "2025-03-10T09:00:00+05:00"}


def test_week_edge_detected(make_plan):
    before = make_plan([DONE], ["b"], ["c"])
    after = make_plan([DONE], [DONE], ["c"])

    assert detect_completion_edges(before, after) == [
        WeekCompletedEvent(week_index=1, week_number=2, focus="Week 2 focus"),
    ]


def test_no_edge_when_week_was_already_complete(make_plan):
    plan = make_plan([DONE], ["b"])
    assert detect_completion_edges(plan, plan) == []


def test_last_task_fires_week_and_plan(make_plan):
    before = make_plan([DONE], [DONE, {"title": "b", "time_spent_seconds": 60}])
    after = make_plan([DONE], [DONE, {**DONE, "time_spent_seconds": 60}])

    events = detect_completion_edges(before, after)

    assert events[0] == WeekCompletedEvent(week_index=1, week_number=2, focus="Week 2 focus")
    assert events[1] == PlanCompletedEvent(total_tasks=3, total_time_spent_seconds=60)


def test_empty_weeks_never_fire(make_plan):
    assert detect_completion_edges(make_plan(["a"], []), make_plan(["a"], [])) == []
