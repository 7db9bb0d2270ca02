"""Completion streak.

The streak log is an append-only set of local calendar days on which at
least one task was completed. The streak value is derived on read:
consecutive days walking backward from today, or from yesterday when today
has no entry yet, stopping at the first gap.

Recording is idempotent per day, so extra completions on a credited day
never change the streak.
"""

from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, field_validator

from kaamyab.core.clock import local_date
from kaamyab.plans.types import Plan


class StreakLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    dates: tuple[date, ...] = ()

    @field_validator("dates")
    @classmethod
    def _sorted_unique(cls, value: tuple[date, ...]) -> tuple[date, ...]:
        return tuple(sorted(set(value)))

    def __contains__(self, day: object) -> bool:
        return day in self.dates


def record_completion(log: StreakLog, day: date) -> StreakLog:
    """Credit ``day``. No-op if it is already credited."""
    if day in log:
        return log
    return StreakLog(dates=(*log.dates, day))


def revoke_completion(log: StreakLog, day: date) -> StreakLog:
    if day not in log:
        return log
    return StreakLog(dates=tuple(d for d in log.dates if d != day))


def has_completed_on(log: StreakLog, day: date) -> bool:
    return day in log


def current_streak(log: StreakLog, today: date) -> int:
    """Length of the run of consecutive credited days ending today or yesterday."""
    credited = set(log.dates)
    cursor = today if today in credited else today - timedelta(days=1)
    streak = 0
    while cursor in credited:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def other_completion_on(plan: Plan, day: date, reference_now: datetime) -> bool:
    """True if any done task in the plan was completed on ``day`` (local)."""
    for _, _, task in plan.iter_tasks():
        if task.is_done and task.completed_at is not None and local_date(task.completed_at, reference_now) == day:
            return True
    return False
