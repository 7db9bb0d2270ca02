"""Plan progress read models.

Pure functions of the Plan, recomputed on every read and never cached in
the document. Done means ``execution_state == done``.
"""

from dataclasses import dataclass
from typing import Literal

from kaamyab.plans.types import Plan, Task, Week

# Ratio of actual to estimated time
FAST_RATIO_MAX = 0.7
ON_TRACK_RATIO_MAX = 1.2


@dataclass(frozen=True)
class PlanProgress:
    completed: int
    total: int
    percent: int


@dataclass(frozen=True)
class CompletionInsight:
    label: str
    kind: Literal["fast", "normal", "slow"]


def _percent(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # round-half-up, but 100 is reserved for a fully done plan
    percent = int(100 * completed / total + 0.5)
    if completed < total:
        return min(percent, 99)
    return percent


def calculate_plan_progress(plan: Plan | None) -> PlanProgress:
    """Completed/total/percent across every week.

    Returns 0 percent for an empty (or missing) plan.
    """
    if plan is None:
        return PlanProgress(completed=0, total=0, percent=0)
    total = plan.task_count
    completed = sum(1 for _, _, task in plan.iter_tasks() if task.is_done)
    return PlanProgress(completed=completed, total=total, percent=_percent(completed, total))


def calculate_week_progress(week: Week) -> PlanProgress:
    total = len(week.tasks)
    completed = sum(1 for task in week.tasks if task.is_done)
    return PlanProgress(completed=completed, total=total, percent=_percent(completed, total))


def calculate_total_time_spent(plan: Plan) -> int:
    """Banked seconds across all tasks (running intervals excluded)."""
    return sum(task.time_spent_seconds for _, _, task in plan.iter_tasks())


def get_completion_insight(task: Task) -> CompletionInsight | None:
    """Compare timed work against the estimate for a done task.

    Returns None when the task is not done or was never timed.
    """
    if not task.is_done or task.time_spent_seconds <= 0:
        return None
    ratio = task.time_spent_seconds / (task.estimated_hours * 3600)
    if ratio <= FAST_RATIO_MAX:
        return CompletionInsight(label="Ahead of time", kind="fast")
    if ratio <= ON_TRACK_RATIO_MAX:
        return CompletionInsight(label="On track", kind="normal")
    return CompletionInsight(label="Took longer", kind="slow")
