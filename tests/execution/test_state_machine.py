"""Tests for pure task lifecycle transitions."""

from datetime import timedelta

import pytest

from kaamyab.execution import state_machine
from kaamyab.plans.errors import ConflictError, InvalidTransitionError
from kaamyab.plans.types import ExecutionState, Task, TaskRef


def test_start_sets_doing_and_start_time(now):
    task = state_machine.start(Task(title="t"), now)
    assert task.execution_state == ExecutionState.DOING
    assert task.execution_started_at == now


def test_pause_banks_elapsed_time(now):
    running = state_machine.start(Task(title="t", time_spent_seconds=60), now)
    paused = state_machine.pause(running, now + timedelta(minutes=2))

    assert paused.execution_state == ExecutionState.PENDING
    assert paused.execution_started_at is None
    assert paused.time_spent_seconds == 180


def test_complete_from_doing_folds_running_interval(now):
    running = state_machine.start(Task(title="t"), now)
    done = state_machine.complete(running, now + timedelta(seconds=90))

    assert done.is_done
    assert done.completed_at == now + timedelta(seconds=90)
    assert done.time_spent_seconds == 90


def test_manual_check_from_pending_keeps_time(now):
    done = state_machine.complete(Task(title="t", time_spent_seconds=30), now)
    assert done.is_done
    assert done.time_spent_seconds == 30


def test_reopen_clears_completion_but_keeps_time(now):
    done = state_machine.complete(Task(title="t", time_spent_seconds=300), now)
    reopened = state_machine.reopen(done)

    assert reopened.execution_state == ExecutionState.PENDING
    assert reopened.completed_at is None
    assert reopened.time_spent_seconds == 300


@pytest.mark.parametrize(
    ("transition", "state"),
    [
        ("start", ExecutionState.DONE),
        ("start", ExecutionState.DOING),
        ("pause", ExecutionState.PENDING),
        ("complete", ExecutionState.DONE),
        ("reopen", ExecutionState.PENDING),
    ],
)
def test_illegal_transitions_raise(now, transition, state):
    task = Task(title="t", execution_state=state)
    fn = getattr(state_machine, transition)
    with pytest.raises(InvalidTransitionError):
        fn(task) if transition == "reopen" else fn(task, now)


def test_elapsed_display_while_doing(now):
    task = Task(
        title="t",
        execution_state=ExecutionState.DOING,
        execution_started_at=now - timedelta(minutes=5),
        time_spent_seconds=600,
    )
    assert state_machine.current_elapsed_seconds(task, now) == 900


def test_time_never_decreases_on_clock_skew(now):
    running = state_machine.start(Task(title="t", time_spent_seconds=100), now)
    paused = state_machine.pause(running, now - timedelta(minutes=1))
    assert paused.time_spent_seconds == 100


def test_plan_start_rejects_second_doing_task(make_plan, now):
    plan = state_machine.start_task(make_plan(["a", "b"]), TaskRef(0, 0), now)
    with pytest.raises(ConflictError) as exc_info:
        state_machine.start_task(plan, TaskRef(0, 1), now)
    assert exc_info.value.active_task_title == "a"


def test_plan_transitions_leave_input_untouched(make_plan, now):
    plan = make_plan(["a"])
    started = state_machine.start_task(plan, TaskRef(0, 0), now)
    assert plan.get_task(TaskRef(0, 0)).execution_state == ExecutionState.PENDING
    assert started.get_task(TaskRef(0, 0)).is_doing
