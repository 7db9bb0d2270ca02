"""Execution timer controller.

Owns the single global ActiveTimer for a loaded session.

Operations (start, pause, complete, reopen, switch) compute a
TimerOutcome without touching controller state. The host calls
``commit(outcome)`` only after the outcome has been persisted, so a failed
write leaves the controller exactly where it was. This keeps the
single-active-timer invariant true at every observable instant.

Elapsed time is only ever written on pause/complete. ``elapsed_seconds``
is a read-only tick for display and can be called at any rate.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from loguru import logger

from kaamyab.core.clock import Clock, local_date
from kaamyab.execution import state_machine
from kaamyab.execution.events import (
    CompletionEvent,
    PlanCompletedEvent,
    WeekCompletedEvent,
    detect_completion_edges,
)
from kaamyab.plans.errors import InvalidTransitionError, TimerConflictError
from kaamyab.plans.types import ActiveTimer, Plan, TaskRef

SwitchMode = Literal["pause", "complete"]


@dataclass(frozen=True)
class TimerOutcome:
    """Result of a timer operation, not yet committed.

    Attributes:
        plan: The new plan value
        events: Celebration events not already fired this session
        completed_on: Local calendar day credited for a completion, if any
        completed_ref: Task that was completed, if any
        time_spent_seconds: Final banked time for the completed/paused task
    """

    plan: Plan
    events: tuple[CompletionEvent, ...] = ()
    completed_on: date | None = None
    completed_ref: TaskRef | None = None
    time_spent_seconds: int | None = None


@dataclass
class _FiredEvents:
    weeks: set[int] = field(default_factory=set)
    plan: bool = False


class ExecutionTimerController:
    """Single active timer, elapsed-time accounting and celebration dedupe."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._active: ActiveTimer | None = None
        self._fired = _FiredEvents()

    @property
    def active_timer(self) -> ActiveTimer | None:
        return self._active

    def load(self, plan: Plan) -> ActiveTimer | None:
        """Initialize from a freshly loaded plan.

        Rebuilds the ActiveTimer from the doing task and marks weeks that
        are already complete as celebrated, so re-completing them later in
        the session does not refire.
        """
        self._fired = _FiredEvents(
            weeks={week.week_number for week in plan.weeks if week.tasks and week.is_complete},
            plan=plan.is_complete,
        )
        return self.recover(plan)

    def recover(self, plan: Plan) -> ActiveTimer | None:
        """Align the in-memory ActiveTimer with the plan's doing task.

        After a reload the timer is reconstructed from the task's own
        ``execution_started_at`` so elapsed time continues rather than
        resetting.
        """
        doing = plan.find_doing()
        if doing is None:
            if self._active is not None:
                logger.debug("Clearing stale active timer", title=self._active.task_title)
            self._active = None
            return None

        ref, task = doing
        started_at = task.execution_started_at or self._clock.now()
        if self._active is None or self._active.ref != ref or self._active.started_at != started_at:
            self._active = ActiveTimer(
                week_index=ref.week_index,
                task_index=ref.task_index,
                task_title=task.title,
                started_at=started_at,
            )
            logger.info(
                "Active timer recovered",
                week_index=ref.week_index,
                task_index=ref.task_index,
                title=task.title,
            )
        return self._active

    def elapsed_seconds(self, plan: Plan) -> int:
        """Tick: elapsed display seconds for the active task (0 when idle)."""
        if self._active is None:
            return 0
        task = plan.get_task(self._active.ref)
        return state_machine.current_elapsed_seconds(task, self._clock.now())

    def _require_active(self, action: str) -> ActiveTimer:
        if self._active is None:
            raise InvalidTransitionError(action, "not running")
        return self._active

    def _new_events(self, before: Plan, after: Plan) -> tuple[CompletionEvent, ...]:
        fresh: list[CompletionEvent] = []
        for event in detect_completion_edges(before, after):
            if isinstance(event, WeekCompletedEvent) and event.week_number in self._fired.weeks:
                continue
            if isinstance(event, PlanCompletedEvent) and self._fired.plan:
                continue
            fresh.append(event)
        return tuple(fresh)

    def start(self, plan: Plan, ref: TaskRef) -> TimerOutcome:
        """Start timing a task.

        Raises:
            TimerConflictError: If another task is already being timed
            InvalidTransitionError: If the task is not pending
        """
        active = self._active
        if active is None:
            doing = plan.find_doing()
            if doing is not None:
                active = ActiveTimer(
                    week_index=doing[0].week_index,
                    task_index=doing[0].task_index,
                    task_title=doing[1].title,
                    started_at=doing[1].execution_started_at or self._clock.now(),
                )
        if active is not None and active.ref != ref:
            logger.warning(
                "Timer conflict",
                active_title=active.task_title,
                requested_week_index=ref.week_index,
                requested_task_index=ref.task_index,
            )
            raise TimerConflictError(active.task_title, active.week_index, active.task_index)

        new_plan = state_machine.start_task(plan, ref, self._clock.now())
        return TimerOutcome(plan=new_plan)

    def pause(self, plan: Plan, ref: TaskRef | None = None) -> TimerOutcome:
        target = ref or self._require_active("pause").ref
        new_plan = state_machine.pause_task(plan, target, self._clock.now())
        return TimerOutcome(plan=new_plan, time_spent_seconds=new_plan.get_task(target).time_spent_seconds)

    def complete(self, plan: Plan, ref: TaskRef | None = None) -> TimerOutcome:
        """Complete a task (the active one by default).

        Completing a pending task directly (manual check) is allowed even
        while another task is being timed.
        """
        now = self._clock.now()
        target = ref or self._require_active("complete").ref
        new_plan = state_machine.complete_task(plan, target, now)
        return TimerOutcome(
            plan=new_plan,
            events=self._new_events(plan, new_plan),
            completed_on=local_date(now, now),
            completed_ref=target,
            time_spent_seconds=new_plan.get_task(target).time_spent_seconds,
        )

    def reopen(self, plan: Plan, ref: TaskRef) -> TimerOutcome:
        return TimerOutcome(plan=state_machine.reopen_task(plan, ref))

    def switch(self, plan: Plan, ref: TaskRef, mode: SwitchMode) -> TimerOutcome:
        """Resolve the running task (pause or complete), then start ``ref``.

        Both transitions land in one outcome so the host persists them with
        a single write.
        """
        active = self._require_active("switch from")
        if mode == "complete":
            first = self.complete(plan, active.ref)
        else:
            first = self.pause(plan, active.ref)
        second = state_machine.start_task(first.plan, ref, self._clock.now())
        return TimerOutcome(
            plan=second,
            events=first.events,
            completed_on=first.completed_on,
            completed_ref=first.completed_ref,
            time_spent_seconds=first.time_spent_seconds,
        )

    def commit(self, outcome: TimerOutcome) -> None:
        """Adopt a persisted outcome: sync the ActiveTimer and mark fired events."""
        for event in outcome.events:
            if isinstance(event, WeekCompletedEvent):
                self._fired.weeks.add(event.week_number)
                logger.info("Week completed", week_number=event.week_number)
            elif isinstance(event, PlanCompletedEvent):
                self._fired.plan = True
                logger.info("Plan completed", total_tasks=event.total_tasks)
        self.recover(outcome.plan)
