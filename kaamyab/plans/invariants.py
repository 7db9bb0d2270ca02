"""Plan document invariants.

Two entry points:

- ``validate_plan`` is strict. It runs on documents coming from the
  generation/extension services and raises PlanInvariantError.
- ``normalize_plan`` is lenient. It runs on documents loaded from the
  store and repairs lifecycle inconsistencies instead of failing, logging
  each repair.

Error codes:
- EMPTY_PLAN: Plan has no weeks
- WEEK_NUMBERING: Week numbers are not 1..n ascending without gaps
- TOTAL_WEEKS_MISMATCH: total_weeks disagrees with the number of weeks
"""

from datetime import datetime

from loguru import logger

from kaamyab.plans.errors import PlanInvariantError
from kaamyab.plans.types import ExecutionState, Plan, Task


def validate_week_numbering(plan: Plan) -> list[str]:
    details: list[str] = []
    for position, week in enumerate(plan.weeks, start=1):
        if week.week_number != position:
            details.append(f"week at position {position} is numbered {week.week_number}")
    return details


def validate_plan(plan: Plan) -> None:
    """Validate plan structure before adopting it.

    Args:
        plan: Candidate plan

    Raises:
        PlanInvariantError: If the plan is empty or weeks are misnumbered
    """
    if not plan.weeks:
        raise PlanInvariantError("EMPTY_PLAN", ["plan has no weeks"])

    numbering = validate_week_numbering(plan)
    if numbering:
        raise PlanInvariantError("WEEK_NUMBERING", numbering)

    if plan.total_weeks and plan.total_weeks != len(plan.weeks):
        raise PlanInvariantError(
            "TOTAL_WEEKS_MISMATCH",
            [f"total_weeks={plan.total_weeks} but plan has {len(plan.weeks)} weeks"],
        )


def _repair_task(task: Task, keep_doing: bool, now: datetime) -> tuple[Task, list[str]]:
    repairs: list[str] = []
    update: dict[str, object] = {}

    if task.execution_state == ExecutionState.DOING:
        if not keep_doing:
            # Demote without crediting time: the second start time is not trustworthy
            update["execution_state"] = ExecutionState.PENDING
            update["execution_started_at"] = None
            repairs.append("demoted extra doing task to pending")
        elif task.execution_started_at is None:
            update["execution_started_at"] = now
            repairs.append("doing task had no execution_started_at; restarted at load time")
        if task.completed_at is not None:
            update["completed_at"] = None
            repairs.append("cleared completed_at on unfinished task")
    elif task.execution_state == ExecutionState.DONE:
        if task.completed_at is None:
            update["completed_at"] = task.execution_started_at or now
            repairs.append("done task had no completed_at; backfilled")
        if task.execution_started_at is not None:
            update["execution_started_at"] = None
            repairs.append("cleared execution_started_at on done task")
    else:
        if task.execution_started_at is not None:
            update["execution_started_at"] = None
            repairs.append("cleared execution_started_at on pending task")
        if task.completed_at is not None:
            update["completed_at"] = None
            repairs.append("cleared completed_at on pending task")

    if not update:
        return task, repairs
    return task.model_copy(update=update), repairs


def normalize_plan(plan: Plan, now: datetime) -> Plan:
    """Repair lifecycle invariant violations found on load.

    - Only the first doing task (document order) stays doing; the rest
      are demoted to pending
    - completed_at present iff done; execution_started_at present iff doing

    This is a recovery step, not a correctness guarantee: every repair is
    logged so the inconsistency stays visible.

    Args:
        plan: Plan as loaded from the store
        now: Current time (used to backfill missing timestamps)

    Returns:
        Plan satisfying the lifecycle invariants
    """
    seen_doing = False
    weeks = []
    total_repairs = 0

    for week_index, week in enumerate(plan.weeks):
        tasks = []
        for task_index, task in enumerate(week.tasks):
            keep_doing = task.is_doing and not seen_doing
            if task.is_doing:
                seen_doing = True
            repaired, repairs = _repair_task(task, keep_doing, now)
            for repair in repairs:
                logger.warning(
                    "Plan invariant repaired on load",
                    week_index=week_index,
                    task_index=task_index,
                    title=task.title,
                    repair=repair,
                )
            total_repairs += len(repairs)
            tasks.append(repaired)
        weeks.append(week.with_tasks(tasks))

    numbering = validate_week_numbering(plan)
    if numbering:
        logger.warning("Loaded plan has irregular week numbering", details=numbering)

    if total_repairs == 0:
        return plan
    logger.info("Plan normalized on load", repairs=total_repairs)
    return plan.model_copy(update={"weeks": tuple(weeks)})


def count_doing_tasks(plan: Plan) -> int:
    return sum(1 for _, _, task in plan.iter_tasks() if task.is_doing)
