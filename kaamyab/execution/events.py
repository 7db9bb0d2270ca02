"""Celebration event contracts.

Events are reported to the caller, never stored in the plan. Detection is
edge-triggered: an event exists only when a week (or the plan) goes from
incomplete to complete between two plan values.
"""

from dataclasses import dataclass

from kaamyab.plans.types import Plan


@dataclass(frozen=True)
class WeekCompletedEvent:
    """Every task in a week is now done.

    Attributes:
        week_index: Position of the week in the plan
        week_number: The week's number (used as dedupe key)
        focus: Week focus text for the celebration copy
    """

    week_index: int
    week_number: int
    focus: str


@dataclass(frozen=True)
class PlanCompletedEvent:
    """Every task in every week is now done.

    Attributes:
        total_tasks: Number of tasks in the plan
        total_time_spent_seconds: Sum of timed work across the plan
    """

    total_tasks: int
    total_time_spent_seconds: int


CompletionEvent = WeekCompletedEvent | PlanCompletedEvent


def detect_completion_edges(before: Plan, after: Plan) -> list[CompletionEvent]:
    """Compare two plan values and return incomplete→complete transitions.

    Weeks are matched by position. Empty weeks never produce an event.
    """
    events: list[CompletionEvent] = []
    for index, week in enumerate(after.weeks):
        if not week.tasks or not week.is_complete:
            continue
        previous = before.weeks[index] if index < len(before.weeks) else None
        if previous is not None and previous.tasks and previous.is_complete:
            continue
        events.append(WeekCompletedEvent(week_index=index, week_number=week.week_number, focus=week.focus))

    if after.is_complete and not before.is_complete:
        events.append(
            PlanCompletedEvent(
                total_tasks=after.task_count,
                total_time_spent_seconds=sum(task.time_spent_seconds for _, _, task in after.iter_tasks()),
            )
        )
    return events
