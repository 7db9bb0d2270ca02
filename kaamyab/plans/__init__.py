"""Plan documents: schema, invariants, lock state and task moves."""

from kaamyab.plans.errors import (
    ConflictError,
    InvalidTransitionError,
    KaamyabError,
    MoveRejectedError,
    PersistenceError,
    PlanInvariantError,
    PlanNotFoundError,
    PlanServiceError,
    TaskNotFoundError,
    TimerConflictError,
    WeekNotFoundError,
)
from kaamyab.plans.invariants import normalize_plan, validate_plan
from kaamyab.plans.lock import WeekLockState, get_active_week_index, get_week_lock_state, is_week_locked
from kaamyab.plans.moves import MoveRequest, NewTask, add_task, move_task, reorder_week, schedule_task, split_task
from kaamyab.plans.types import ActiveTimer, ExecutionState, Plan, Priority, Task, TaskRef, Week

__all__ = [
    "ActiveTimer",
    "ConflictError",
    "ExecutionState",
    "InvalidTransitionError",
    "KaamyabError",
    "MoveRejectedError",
    "MoveRequest",
    "NewTask",
    "PersistenceError",
    "Plan",
    "PlanInvariantError",
    "PlanNotFoundError",
    "PlanServiceError",
    "Priority",
    "Task",
    "TaskNotFoundError",
    "TaskRef",
    "TimerConflictError",
    "Week",
    "WeekLockState",
    "WeekNotFoundError",
    "add_task",
    "get_active_week_index",
    "get_week_lock_state",
    "is_week_locked",
    "move_task",
    "normalize_plan",
    "reorder_week",
    "schedule_task",
    "split_task",
    "validate_plan",
]
