"""Calendar export surface.

The core exposes provider-neutral entries; the calendar integration turns
them into provider events. Nothing here knows about ICS or any provider.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from kaamyab.plans.types import Plan, Priority, TaskRef, Week

# Mon-Fri, as date.weekday() values
WORK_DAYS = (0, 1, 2, 3, 4)

START_HOUR_BY_PRIORITY: dict[Priority, int] = {
    Priority.HIGH: 9,
    Priority.MEDIUM: 11,
    Priority.LOW: 14,
}


@dataclass(frozen=True)
class CalendarEntry:
    ref: TaskRef
    week_number: int
    title: str
    scheduled_at: datetime
    estimated_hours: float

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(hours=self.estimated_hours)


def get_calendar_entries(plan: Plan) -> list[CalendarEntry]:
    """One entry per task that has a scheduled_at, in plan order."""
    entries = []
    for ref, week, task in plan.iter_tasks():
        if task.scheduled_at is None:
            continue
        entries.append(
            CalendarEntry(
                ref=ref,
                week_number=week.week_number,
                title=task.title,
                scheduled_at=task.scheduled_at,
                estimated_hours=task.estimated_hours,
            )
        )
    return entries


def week_start_date(week_number: int, plan_created_at: date) -> date:
    """Monday that starts ``week_number``.

    Week 1 starts on the first Monday on or after the plan's creation day.
    """
    days_until_monday = (7 - plan_created_at.weekday()) % 7
    first_monday = plan_created_at + timedelta(days=days_until_monday)
    return first_monday + timedelta(weeks=week_number - 1)


def suggest_week_schedule(week: Week, week_index: int, week_start: date) -> list[CalendarEntry]:
    """Spread a week's incomplete tasks across Mon-Fri, one per day in order.

    Start hour depends on priority (High 9:00, Medium 11:00, Low 14:00).
    Tasks beyond five wrap around to Monday again.
    """
    entries = []
    slot = 0
    for task_index, task in enumerate(week.tasks):
        if task.is_done:
            continue
        weekday = WORK_DAYS[slot % len(WORK_DAYS)]
        day = week_start + timedelta(days=(weekday - week_start.weekday()) % 7)
        start = datetime.combine(day, time(hour=START_HOUR_BY_PRIORITY[task.priority]))
        entries.append(
            CalendarEntry(
                ref=TaskRef(week_index, task_index),
                week_number=week.week_number,
                title=task.title,
                scheduled_at=start,
                estimated_hours=task.estimated_hours,
            )
        )
        slot += 1
    return entries
