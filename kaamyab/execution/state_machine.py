"""Task lifecycle transitions.

    pending → doing → done
    doing → pending      (pause)
    done → pending       (reopen)
    pending → done       (manual check, no timing)

Task-level functions take a Task and return a new Task. Plan-level
functions take a Plan and a TaskRef and return a new Plan; they add the
plan-wide rule that at most one task is doing. Nothing here persists
anything or reads the clock.
"""

from datetime import datetime

from loguru import logger

from kaamyab.core.clock import elapsed_seconds_between
from kaamyab.plans.errors import ConflictError, InvalidTransitionError
from kaamyab.plans.types import ExecutionState, Plan, Task, TaskRef


def start(task: Task, now: datetime) -> Task:
    if task.execution_state != ExecutionState.PENDING:
        raise InvalidTransitionError("start", task.execution_state)
    return task.model_copy(
        update={
            "execution_state": ExecutionState.DOING,
            "execution_started_at": now,
            "completed_at": None,
        }
    )


def _finalized_time(task: Task, now: datetime) -> int:
    if task.execution_started_at is None:
        return task.time_spent_seconds
    return task.time_spent_seconds + elapsed_seconds_between(task.execution_started_at, now)


def pause(task: Task, now: datetime) -> Task:
    if task.execution_state != ExecutionState.DOING:
        raise InvalidTransitionError("pause", task.execution_state)
    return task.model_copy(
        update={
            "execution_state": ExecutionState.PENDING,
            "execution_started_at": None,
            "time_spent_seconds": _finalized_time(task, now),
        }
    )


def complete(task: Task, now: datetime) -> Task:
    """Mark a task done from pending or doing.

    Coming from doing, the running interval is folded into
    ``time_spent_seconds`` exactly as a pause would.
    """
    if task.execution_state == ExecutionState.DONE:
        raise InvalidTransitionError("complete", task.execution_state)
    return task.model_copy(
        update={
            "execution_state": ExecutionState.DONE,
            "execution_started_at": None,
            "completed_at": now,
            "time_spent_seconds": _finalized_time(task, now),
        }
    )


def reopen(task: Task) -> Task:
    if task.execution_state != ExecutionState.DONE:
        raise InvalidTransitionError("reopen", task.execution_state)
    return task.model_copy(
        update={
            "execution_state": ExecutionState.PENDING,
            "completed_at": None,
        }
    )


def current_elapsed_seconds(task: Task, now: datetime) -> int:
    """Display value: banked time plus the running interval while doing."""
    if task.is_doing and task.execution_started_at is not None:
        return task.time_spent_seconds + elapsed_seconds_between(task.execution_started_at, now)
    return task.time_spent_seconds


def start_task(plan: Plan, ref: TaskRef, now: datetime) -> Plan:
    """Start a task, enforcing the single-doing-task rule across the plan.

    Raises:
        TaskNotFoundError: If ref does not point at a task
        ConflictError: If a different task is already doing
        InvalidTransitionError: If the task is not pending
    """
    task = plan.get_task(ref)
    doing = plan.find_doing()
    if doing is not None and doing[0] != ref:
        raise ConflictError(doing[1].title)
    logger.debug("Starting task", week_index=ref.week_index, task_index=ref.task_index, title=task.title)
    return plan.replace_task(ref, start(task, now))


def pause_task(plan: Plan, ref: TaskRef, now: datetime) -> Plan:
    task = plan.get_task(ref)
    logger.debug("Pausing task", week_index=ref.week_index, task_index=ref.task_index, title=task.title)
    return plan.replace_task(ref, pause(task, now))


def complete_task(plan: Plan, ref: TaskRef, now: datetime) -> Plan:
    task = plan.get_task(ref)
    logger.debug("Completing task", week_index=ref.week_index, task_index=ref.task_index, title=task.title)
    return plan.replace_task(ref, complete(task, now))


def reopen_task(plan: Plan, ref: TaskRef) -> Plan:
    task = plan.get_task(ref)
    logger.debug("Reopening task", week_index=ref.week_index, task_index=ref.task_index, title=task.title)
    return plan.replace_task(ref, reopen(task))
