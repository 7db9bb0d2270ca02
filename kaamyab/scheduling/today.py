"""Today selection engine.

Derives the ordered "Today" list from the plan and the current local
time. Pure and stateless: it re-runs on every relevant state change and
never mutates the plan.

Selection:
1. Tasks whose scheduled_at falls in [start_of_today, start_of_tomorrow),
   skipping tasks in locked weeks
2. If none, the first few incomplete tasks of the active week
   (priority first, then original order)
3. Split into completed and incomplete
4. Classify the day's load into a signal state and derive a focus count
5. First focus_count incomplete tasks are focused, the rest muted
6. Tasks scheduled before today and not done are reported as missed.
   They are never rescheduled here.

Ordering: higher priority first; within a priority, earlier scheduled_at
first; tasks without scheduled_at after those with one; then plan order.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

from kaamyab.config.settings import SignalThresholds
from kaamyab.core.clock import start_of_day, to_local
from kaamyab.plans.lock import get_active_week_index, get_locked_week_indices
from kaamyab.plans.types import PRIORITY_WEIGHT, Plan, Task, TaskRef
from kaamyab.scheduling.signal import (
    LoadIndicators,
    SignalState,
    classify_signal,
    focus_count_for,
    headline_for,
    subtext_for,
)

TodaySource = Literal["scheduled", "fallback", "empty"]


@dataclass(frozen=True)
class TodayTask:
    ref: TaskRef
    task: Task
    week_number: int
    week_focus: str
    scheduled_at: datetime | None = None


@dataclass(frozen=True)
class TodayView:
    """Everything the Today screen renders.

    Attributes:
        source: Whether the list came from scheduled tasks or the active-week fallback
        focused: Incomplete tasks to emphasize, in display order
        muted: Remaining incomplete tasks, visible but de-emphasized
        completed: Today's tasks that are already done
        missed: Tasks scheduled before today that are still not done
        signal: Load classification
        focus_count: Size of the focus window
        indicators: Raw load inputs used for the signal
        headline: Short daily context line
        subtext: Supporting context line
    """

    source: TodaySource
    signal: SignalState
    focus_count: int
    indicators: LoadIndicators
    headline: str
    subtext: str
    focused: list[TodayTask] = field(default_factory=list)
    muted: list[TodayTask] = field(default_factory=list)
    completed: list[TodayTask] = field(default_factory=list)
    missed: list[TodayTask] = field(default_factory=list)

    @property
    def incomplete(self) -> list[TodayTask]:
        return [*self.focused, *self.muted]

    @property
    def has_missed(self) -> bool:
        return bool(self.missed)


def today_sort_key(item: TodayTask) -> tuple[int, int, datetime | int, int, int]:
    """Priority desc, then scheduled_at asc (unscheduled last), then plan order."""
    weight = -PRIORITY_WEIGHT[item.task.priority]
    if item.scheduled_at is None:
        return (weight, 1, 0, item.ref.week_index, item.ref.task_index)
    return (weight, 0, item.scheduled_at, item.ref.week_index, item.ref.task_index)


def _local_scheduled(task: Task, now: datetime) -> datetime | None:
    if task.scheduled_at is None:
        return None
    return to_local(task.scheduled_at, now)


def get_tasks_scheduled_for_today(plan: Plan, now: datetime) -> list[TodayTask]:
    """Tasks scheduled within today's local bounds, in scheduled order."""
    day_start = start_of_day(now)
    day_end = day_start + timedelta(days=1)
    locked = get_locked_week_indices(plan)

    selected: list[TodayTask] = []
    for ref, week, task in plan.iter_tasks():
        if ref.week_index in locked:
            continue
        scheduled = _local_scheduled(task, now)
        if scheduled is not None and day_start <= scheduled < day_end:
            selected.append(TodayTask(ref, task, week.week_number, week.focus, scheduled))
    selected.sort(key=lambda item: (item.scheduled_at, item.ref))
    return selected


def get_fallback_tasks(plan: Plan, now: datetime, limit: int) -> list[TodayTask]:
    """First ``limit`` incomplete tasks of the active week, priority first."""
    active_index = get_active_week_index(plan)
    if active_index is None:
        return []
    week = plan.weeks[active_index]
    candidates = [
        TodayTask(TaskRef(active_index, index), task, week.week_number, week.focus, _local_scheduled(task, now))
        for index, task in enumerate(week.tasks)
        if not task.is_done
    ]
    candidates.sort(key=lambda item: (-PRIORITY_WEIGHT[item.task.priority], item.ref.task_index))
    return candidates[:limit]


def get_missed_tasks(plan: Plan, now: datetime) -> list[TodayTask]:
    """Tasks scheduled strictly before today that are still not done."""
    day_start = start_of_day(now)
    missed = []
    for ref, week, task in plan.iter_tasks():
        if task.is_done:
            continue
        scheduled = _local_scheduled(task, now)
        if scheduled is not None and scheduled < day_start:
            missed.append(TodayTask(ref, task, week.week_number, week.focus, scheduled))
    missed.sort(key=lambda item: (item.scheduled_at, item.ref))
    return missed


def count_recent_completions(plan: Plan, now: datetime, lookback_days: int) -> int:
    """Completions from the start of the lookback window up to now."""
    window_start = start_of_day(now) - timedelta(days=lookback_days)
    count = 0
    for _, _, task in plan.iter_tasks():
        if task.is_done and task.completed_at is not None:
            completed_at = to_local(task.completed_at, now)
            if window_start <= completed_at <= now:
                count += 1
    return count


def select_today(plan: Plan | None, now: datetime, thresholds: SignalThresholds) -> TodayView:
    """Build the Today view.

    Args:
        plan: Current plan (None renders an empty, normal day)
        now: Current local time from the injected clock
        thresholds: Signal and focus configuration

    Returns:
        TodayView with focused/muted/completed/missed partitions
    """
    if plan is None or not plan.weeks:
        indicators = LoadIndicators(today_count=0, missed_count=0, recent_completions=0)
        return TodayView(
            source="empty",
            signal=SignalState.NORMAL,
            focus_count=thresholds.focus_count_normal,
            indicators=indicators,
            headline="Ready to start",
            subtext="Create a plan to see your daily focus.",
        )

    selected = get_tasks_scheduled_for_today(plan, now)
    source: TodaySource = "scheduled"
    if not selected:
        selected = get_fallback_tasks(plan, now, thresholds.fallback_limit)
        source = "fallback" if selected else "empty"

    completed = [item for item in selected if item.task.is_done]
    incomplete = sorted((item for item in selected if not item.task.is_done), key=today_sort_key)
    missed = get_missed_tasks(plan, now)

    indicators = LoadIndicators(
        today_count=len(selected),
        missed_count=len(missed),
        recent_completions=count_recent_completions(plan, now, thresholds.velocity_lookback_days),
    )
    signal = classify_signal(indicators, thresholds)
    focus_count = focus_count_for(signal, indicators.today_count, thresholds)

    return TodayView(
        source=source,
        signal=signal,
        focus_count=focus_count,
        indicators=indicators,
        headline=headline_for(signal, indicators.missed_count),
        subtext=subtext_for(signal, indicators.missed_count, indicators.today_count),
        focused=incomplete[:focus_count],
        muted=incomplete[focus_count:],
        completed=completed,
        missed=missed,
    )
