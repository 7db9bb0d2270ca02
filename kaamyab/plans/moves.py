"""Cross-week move, reorder and manual task edits.

All operations validate against the current plan first and raise
MoveRejectedError before building anything. On success they return a
whole new Plan value, so the host persists the result as one atomic
document replace and a half-applied move can never be stored.

Guards:
- The doing task never changes position (pause or complete it first)
- Nothing moves into or out of a locked week
- Same-week reorders skip the lock checks
- Lifecycle fields (execution_state, timers, completion) are never touched
"""

from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from pydantic import BaseModel, Field

from kaamyab.plans.errors import MoveRejectedError
from kaamyab.plans.lock import is_week_locked
from kaamyab.plans.types import ActiveTimer, ExecutionState, Plan, Priority, Task, TaskRef


@dataclass(frozen=True)
class MoveRequest:
    source_week_index: int
    source_task_index: int
    dest_week_index: int
    dest_task_index: int

    @property
    def source(self) -> TaskRef:
        return TaskRef(self.source_week_index, self.source_task_index)

    @property
    def is_same_week(self) -> bool:
        return self.source_week_index == self.dest_week_index


class NewTask(BaseModel):
    """Manually added task (or one half of a split)."""

    title: str = Field(min_length=1)
    priority: Priority = Priority.MEDIUM
    estimated_hours: float = Field(gt=0)
    description: str | None = None

    def to_task(self) -> Task:
        extra = {"how_to": self.description} if self.description else {}
        return Task(
            title=self.title,
            priority=self.priority,
            estimated_hours=self.estimated_hours,
            execution_state=ExecutionState.PENDING,
            **extra,
        )


def _is_timed(task: Task, ref: TaskRef, active_timer: ActiveTimer | None) -> bool:
    return task.is_doing or (active_timer is not None and active_timer.ref == ref)


def check_task_movable(plan: Plan, ref: TaskRef, active_timer: ActiveTimer | None = None) -> None:
    """Raise if the task at ref cannot be picked up at all.

    Raises:
        TaskNotFoundError: If ref does not exist
        MoveRejectedError: TASK_ACTIVE if the task is being timed
    """
    task = plan.get_task(ref)
    if _is_timed(task, ref, active_timer):
        raise MoveRejectedError("TASK_ACTIVE", "Complete or pause this task first")


def validate_move(plan: Plan, request: MoveRequest, active_timer: ActiveTimer | None = None) -> None:
    """Validate a move request against the current plan.

    Args:
        plan: Current plan
        request: Requested move
        active_timer: In-memory timer, if any

    Raises:
        MoveRejectedError: If the move violates a guard
        TaskNotFoundError / WeekNotFoundError: If an index is out of range
    """
    check_task_movable(plan, request.source, active_timer)
    dest_week = plan.get_week(request.dest_week_index)

    if request.is_same_week:
        upper = len(dest_week.tasks) - 1
    else:
        if is_week_locked(plan, request.dest_week_index):
            raise MoveRejectedError(
                "DESTINATION_LOCKED",
                f"Week {dest_week.week_number} is locked until earlier weeks are complete",
            )
        if is_week_locked(plan, request.source_week_index):
            source_week = plan.weeks[request.source_week_index]
            raise MoveRejectedError(
                "SOURCE_LOCKED",
                f"Week {source_week.week_number} is locked; its tasks cannot be moved yet",
            )
        upper = len(dest_week.tasks)

    if request.dest_task_index < 0 or request.dest_task_index > upper:
        raise MoveRejectedError(
            "INVALID_INDEX",
            f"Destination position {request.dest_task_index} is outside week {dest_week.week_number}",
        )


def move_task(plan: Plan, request: MoveRequest, active_timer: ActiveTimer | None = None) -> Plan:
    """Move a task to another position, within or across weeks.

    Returns:
        New plan with the task removed from the source and inserted at the
        destination. Total task count is unchanged.
    """
    validate_move(plan, request, active_timer)

    weeks = list(plan.weeks)
    source_tasks = list(weeks[request.source_week_index].tasks)
    moved = source_tasks.pop(request.source_task_index)

    if request.is_same_week:
        source_tasks.insert(request.dest_task_index, moved)
        weeks[request.source_week_index] = weeks[request.source_week_index].with_tasks(source_tasks)
    else:
        dest_tasks = list(weeks[request.dest_week_index].tasks)
        dest_tasks.insert(request.dest_task_index, moved)
        weeks[request.source_week_index] = weeks[request.source_week_index].with_tasks(source_tasks)
        weeks[request.dest_week_index] = weeks[request.dest_week_index].with_tasks(dest_tasks)

    logger.info(
        "Task moved",
        title=moved.title,
        source_week_index=request.source_week_index,
        source_task_index=request.source_task_index,
        dest_week_index=request.dest_week_index,
        dest_task_index=request.dest_task_index,
    )
    return plan.model_copy(update={"weeks": tuple(weeks)})


def reorder_week(
    plan: Plan,
    week_index: int,
    new_order: list[int],
    active_timer: ActiveTimer | None = None,
) -> Plan:
    """Reorder a week's tasks by a permutation of their current indices.

    ``new_order[i]`` is the current index of the task that should end up
    at position ``i``. The doing task must keep its position.

    Raises:
        MoveRejectedError: INVALID_ORDER if new_order is not a permutation,
            TASK_ACTIVE if the doing task would change position
    """
    week = plan.get_week(week_index)
    if sorted(new_order) != list(range(len(week.tasks))):
        raise MoveRejectedError("INVALID_ORDER", "New order must list every task in the week exactly once")

    for position, current_index in enumerate(new_order):
        ref = TaskRef(week_index, current_index)
        if position != current_index and _is_timed(week.tasks[current_index], ref, active_timer):
            raise MoveRejectedError("TASK_ACTIVE", "Complete or pause this task first")

    reordered = [week.tasks[index] for index in new_order]
    logger.info("Week reordered", week_index=week_index, order=new_order)
    return plan.replace_week(week_index, week.with_tasks(reordered))


def add_task(plan: Plan, week_index: int, new_task: NewTask) -> Plan:
    """Append a pending task to a week."""
    week = plan.get_week(week_index)
    logger.info("Task added", week_index=week_index, title=new_task.title)
    return plan.replace_week(week_index, week.with_tasks([*week.tasks, new_task.to_task()]))


def check_task_splittable(plan: Plan, ref: TaskRef, active_timer: ActiveTimer | None = None) -> None:
    """Raise if a task cannot be split.

    Raises:
        MoveRejectedError: SOURCE_LOCKED, TASK_COMPLETED or TASK_ACTIVE
    """
    task = plan.get_task(ref)
    if is_week_locked(plan, ref.week_index):
        raise MoveRejectedError("SOURCE_LOCKED", "Cannot split tasks in locked weeks")
    if task.is_done:
        raise MoveRejectedError("TASK_COMPLETED", "Cannot split completed tasks")
    if _is_timed(task, ref, active_timer):
        raise MoveRejectedError("TASK_ACTIVE", "Cannot split task in progress")


def split_task(
    plan: Plan,
    ref: TaskRef,
    first: NewTask,
    second: NewTask,
    active_timer: ActiveTimer | None = None,
) -> Plan:
    """Replace a task with two pending tasks at the same position.

    Both halves inherit the original task's priority.
    """
    check_task_splittable(plan, ref, active_timer)
    original = plan.get_task(ref)
    halves = [
        first.model_copy(update={"priority": original.priority}).to_task(),
        second.model_copy(update={"priority": original.priority}).to_task(),
    ]
    week = plan.weeks[ref.week_index]
    tasks = list(week.tasks)
    tasks[ref.task_index : ref.task_index + 1] = halves
    logger.info("Task split", week_index=ref.week_index, task_index=ref.task_index, title=original.title)
    return plan.replace_week(ref.week_index, week.with_tasks(tasks))


def schedule_task(plan: Plan, ref: TaskRef, scheduled_at: datetime | None) -> Plan:
    """Set (or clear, with None) the calendar slot of a task.

    Raises:
        MoveRejectedError: TASK_COMPLETED if the task is already done
    """
    task = plan.get_task(ref)
    if task.is_done:
        raise MoveRejectedError("TASK_COMPLETED", "Completed tasks cannot be rescheduled")
    logger.info(
        "Task scheduled",
        week_index=ref.week_index,
        task_index=ref.task_index,
        scheduled_at=scheduled_at.isoformat() if scheduled_at else None,
    )
    return plan.replace_task(ref, task.model_copy(update={"scheduled_at": scheduled_at}))
