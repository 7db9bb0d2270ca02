"""Adopting plans produced by the external generation/extension services.

The services are opaque. Everything they return is validated here before
it can replace the user's plan.

Error codes (PlanInvariantError):
- EXTENSION_SHRANK: Extended plan has no more weeks than the original
- EXTENSION_ALTERED_STATE: An existing task's lifecycle fields changed
"""

from typing import Any

from loguru import logger

from kaamyab.plans.errors import PlanInvariantError
from kaamyab.plans.invariants import validate_plan
from kaamyab.plans.types import ExecutionState, Plan, Week


def _fresh_week(week: Week) -> Week:
    tasks = [
        task.model_copy(
            update={
                "execution_state": ExecutionState.PENDING,
                "completed_at": None,
                "execution_started_at": None,
                "time_spent_seconds": 0,
            }
        )
        for task in week.tasks
    ]
    return week.with_tasks(tasks)


def adopt_generated_plan(generated: Plan) -> Plan:
    """Validate a newly generated plan and reset every task to pending.

    Raises:
        PlanInvariantError: If week structure is invalid
    """
    plan = generated.model_copy(
        update={
            "weeks": tuple(_fresh_week(week) for week in generated.weeks),
            "total_weeks": generated.total_weeks or len(generated.weeks),
        }
    )
    validate_plan(plan)
    logger.info("Generated plan adopted", weeks=len(plan.weeks), tasks=plan.task_count)
    return plan


def merge_extension_weeks(existing: Plan, new_weeks: list[dict[str, Any]]) -> Plan:
    """Append service-provided weeks to the existing plan.

    New weeks always start with every task pending.
    """
    appended = tuple(_fresh_week(Week.model_validate(raw)) for raw in new_weeks)
    weeks = existing.weeks + appended
    return existing.model_copy(update={"weeks": weeks, "total_weeks": len(weeks)})


def _lifecycle_fields(week: Week) -> list[tuple[Any, ...]]:
    return [
        (task.execution_state, task.execution_started_at, task.completed_at, task.time_spent_seconds)
        for task in week.tasks
    ]


def validate_extension(existing: Plan, extended: Plan) -> None:
    """Check an extended plan against the plan it extends.

    - Sequential week numbering continues with no gaps
    - No existing task's state, timestamps or banked time is altered

    Raises:
        PlanInvariantError: If the extension is not a valid continuation
    """
    validate_plan(extended)

    if len(extended.weeks) <= len(existing.weeks):
        raise PlanInvariantError(
            "EXTENSION_SHRANK",
            [f"extended plan has {len(extended.weeks)} weeks, original has {len(existing.weeks)}"],
        )

    altered: list[str] = []
    for index, week in enumerate(existing.weeks):
        if _lifecycle_fields(week) != _lifecycle_fields(extended.weeks[index]):
            altered.append(f"week {week.week_number} task lifecycle changed")
    if altered:
        raise PlanInvariantError("EXTENSION_ALTERED_STATE", altered)


def adopt_extended_plan(existing: Plan, extended: Plan) -> Plan:
    """Validate the extended plan and reset its appended weeks to pending.

    Whatever execution state the service sent for the new weeks is
    discarded, so they land after the active week and start out locked
    (unless every existing week was already complete).

    Raises:
        PlanInvariantError: If the extension is not a valid continuation
    """
    validate_extension(existing, extended)
    kept = len(existing.weeks)
    appended = extended.weeks[kept:]
    reset = sum(1 for week in appended for task in week.tasks if task.execution_state != ExecutionState.PENDING)
    if reset:
        logger.warning("Extension weeks arrived with non-pending tasks, reset to pending", tasks=reset)

    weeks = extended.weeks[:kept] + tuple(_fresh_week(week) for week in appended)
    plan = extended.model_copy(update={"weeks": weeks, "total_weeks": len(weeks)})
    logger.info(
        "Plan extended",
        weeks_before=kept,
        weeks_after=len(weeks),
    )
    return plan
