"""Session host: the one place that owns the mutable plan reference.

Everything below this layer is pure (plans in, plans out). A PlanSession
holds the current Plan, the timer controller and the streak log for one
user, and applies user intents through ``dispatch``:

    validate -> pure transition -> optimistic write -> commit or roll back

Validation errors (KaamyabError subclasses) propagate before anything is
touched. Persistence failures never raise out of ``dispatch``; they come
back as ``DispatchResult(success=False, notice=...)`` with the previous
plan restored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from loguru import logger

from kaamyab.config.settings import Settings, settings as default_settings
from kaamyab.core.clock import Clock, SystemClock, local_date
from kaamyab.execution.events import CompletionEvent
from kaamyab.execution.timer import ExecutionTimerController, SwitchMode, TimerOutcome
from kaamyab.integrations.plan_service import PlanGenerationService
from kaamyab.metrics.progress import PlanProgress, calculate_plan_progress
from kaamyab.metrics.streak import (
    StreakLog,
    current_streak,
    has_completed_on,
    other_completion_on,
    record_completion,
    revoke_completion,
)
from kaamyab.persistence.store import PlanStore
from kaamyab.persistence.synchronizer import PersistenceSynchronizer
from kaamyab.plans.errors import PersistenceError, PlanNotFoundError
from kaamyab.plans.invariants import normalize_plan
from kaamyab.plans.lifecycle import adopt_extended_plan, adopt_generated_plan
from kaamyab.plans.moves import (
    MoveRequest,
    NewTask,
    add_task,
    move_task,
    reorder_week,
    schedule_task,
    split_task,
)
from kaamyab.plans.types import ActiveTimer, Plan, TaskRef
from kaamyab.scheduling.today import TodayView, select_today


@dataclass(frozen=True)
class StartTask:
    ref: TaskRef


@dataclass(frozen=True)
class PauseTask:
    ref: TaskRef | None = None


@dataclass(frozen=True)
class CompleteTask:
    ref: TaskRef | None = None


@dataclass(frozen=True)
class ReopenTask:
    ref: TaskRef


@dataclass(frozen=True)
class SwitchTask:
    """Resolve the running task, then start ``ref``."""

    ref: TaskRef
    mode: SwitchMode = "pause"


@dataclass(frozen=True)
class MoveTask:
    request: MoveRequest


@dataclass(frozen=True)
class ReorderWeek:
    week_index: int
    new_order: list[int]


@dataclass(frozen=True)
class AddTask:
    week_index: int
    task: NewTask


@dataclass(frozen=True)
class SplitTask:
    ref: TaskRef
    first: NewTask
    second: NewTask


@dataclass(frozen=True)
class ScheduleTask:
    ref: TaskRef
    scheduled_at: datetime | None


Action = (
    StartTask
    | PauseTask
    | CompleteTask
    | ReopenTask
    | SwitchTask
    | MoveTask
    | ReorderWeek
    | AddTask
    | SplitTask
    | ScheduleTask
)

TIMER_ACTIONS = (StartTask, PauseTask, CompleteTask, ReopenTask, SwitchTask)


@dataclass(frozen=True)
class DispatchResult:
    """What the UI needs after an action.

    Attributes:
        success: False only when the write failed and the plan was rolled back
        plan: Current plan after the action (or after rollback)
        events: Celebration events to show, at most once per session
        notice: Transient message for the user when success is False
    """

    success: bool
    plan: Plan
    events: tuple[CompletionEvent, ...] = ()
    notice: str | None = None


@dataclass
class PlanSession:
    user_id: str
    plan_id: str | None
    plan: Plan | None
    store: PlanStore
    clock: Clock = field(default_factory=SystemClock)
    settings: Settings = field(default_factory=lambda: default_settings)
    streak_log: StreakLog = field(default_factory=StreakLog)

    def __post_init__(self) -> None:
        self.timer = ExecutionTimerController(self.clock)
        self._synchronizer = PersistenceSynchronizer(self.store)
        if self.plan is not None:
            self.timer.load(self.plan)

    @classmethod
    async def load(
        cls,
        store: PlanStore,
        user_id: str,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ) -> "PlanSession":
        """Fetch the user's plan, repair it if needed and recover the timer.

        Raises:
            PlanNotFoundError: If the user has no plan
            PersistenceError: If the store cannot be read
        """
        clock = clock or SystemClock()
        stored = await store.get(user_id)
        plan = normalize_plan(stored.plan, clock.now())
        if plan != stored.plan:
            try:
                await store.update(stored.plan_id, plan)
            except PersistenceError as e:
                logger.bind(plan_id=stored.plan_id, error=e.reason).warning("Could not save repaired plan")

        streak_log = await store.get_streak(user_id)
        session = cls(
            user_id=user_id,
            plan_id=stored.plan_id,
            plan=plan,
            store=store,
            clock=clock,
            settings=settings or default_settings,
            streak_log=streak_log,
        )
        logger.bind(user_id=user_id, plan_id=stored.plan_id).info(
            "Plan session loaded",
            active_task=session.active_timer.task_title if session.active_timer else None,
        )
        return session

    @property
    def active_timer(self) -> ActiveTimer | None:
        return self.timer.active_timer

    def _require_plan(self) -> tuple[str, Plan]:
        if self.plan is None or self.plan_id is None:
            raise PlanNotFoundError(self.user_id)
        return self.plan_id, self.plan

    def _apply(self, plan: Plan) -> None:
        self.plan = plan

    def _timer_outcome(self, plan: Plan, action: Action) -> TimerOutcome:
        if isinstance(action, StartTask):
            return self.timer.start(plan, action.ref)
        if isinstance(action, PauseTask):
            return self.timer.pause(plan, action.ref)
        if isinstance(action, CompleteTask):
            return self.timer.complete(plan, action.ref)
        if isinstance(action, ReopenTask):
            return self.timer.reopen(plan, action.ref)
        if isinstance(action, SwitchTask):
            return self.timer.switch(plan, action.ref, action.mode)
        raise TypeError(f"Not a timer action: {type(action).__name__}")

    def _edit(self, plan: Plan, action: Action) -> Plan:
        active = self.timer.active_timer
        if isinstance(action, MoveTask):
            return move_task(plan, action.request, active)
        if isinstance(action, ReorderWeek):
            return reorder_week(plan, action.week_index, action.new_order, active)
        if isinstance(action, AddTask):
            return add_task(plan, action.week_index, action.task)
        if isinstance(action, SplitTask):
            return split_task(plan, action.ref, action.first, action.second, active)
        if isinstance(action, ScheduleTask):
            return schedule_task(plan, action.ref, action.scheduled_at)
        raise TypeError(f"Unsupported action: {type(action).__name__}")

    async def dispatch(self, action: Action) -> DispatchResult:
        """Apply one user action.

        Raises:
            KaamyabError: If the action is rejected (nothing is changed)
        """
        plan_id, snapshot = self._require_plan()
        name = type(action).__name__

        if isinstance(action, TIMER_ACTIONS):
            outcome = self._timer_outcome(snapshot, action)
        else:
            outcome = TimerOutcome(plan=self._edit(snapshot, action))

        result = await self._synchronizer.commit(plan_id, snapshot, outcome.plan, self._apply, action=name)
        if not result.success:
            self.timer.recover(snapshot)
            return DispatchResult(success=False, plan=result.plan, notice=result.notice)

        self.timer.commit(outcome)
        if outcome.completed_on is not None:
            await self._credit_streak(outcome.completed_on)
        elif isinstance(action, ReopenTask):
            await self._maybe_revoke_streak(snapshot, action.ref, outcome.plan)

        return DispatchResult(success=True, plan=outcome.plan, events=outcome.events)

    async def _save_streak(self, log: StreakLog) -> None:
        self.streak_log = log
        try:
            await self.store.save_streak(self.user_id, log)
        except PersistenceError as e:
            # kept in memory; the whole log is written again on the next change
            logger.bind(user_id=self.user_id, error=e.reason).warning("Streak log write failed")

    async def _credit_streak(self, day: date) -> None:
        updated = record_completion(self.streak_log, day)
        if updated is not self.streak_log:
            await self._save_streak(updated)

    async def _maybe_revoke_streak(self, before: Plan, ref: TaskRef, after: Plan) -> None:
        if not self.settings.streak_revoke_on_reopen:
            return
        completed_at = before.get_task(ref).completed_at
        if completed_at is None:
            return
        now = self.clock.now()
        day = local_date(completed_at, now)
        if other_completion_on(after, day, now):
            return
        updated = revoke_completion(self.streak_log, day)
        if updated is not self.streak_log:
            logger.bind(user_id=self.user_id, day=day.isoformat()).info("Streak credit revoked")
            await self._save_streak(updated)

    def today(self) -> TodayView:
        return select_today(self.plan, self.clock.now(), self.settings.signal_thresholds())

    def progress(self) -> PlanProgress:
        return calculate_plan_progress(self.plan)

    def streak(self) -> int:
        now = self.clock.now()
        return current_streak(self.streak_log, local_date(now, now))

    def has_completed_today(self) -> bool:
        now = self.clock.now()
        return has_completed_on(self.streak_log, local_date(now, now))

    def elapsed_seconds(self) -> int:
        """Display tick for the active task; safe to call at any rate."""
        if self.plan is None:
            return 0
        return self.timer.elapsed_seconds(self.plan)

    async def extend(self, service: PlanGenerationService, weeks_to_add: int) -> DispatchResult:
        """Ask the service for more weeks and adopt them.

        Raises:
            PlanServiceError: If the service call fails
            PlanInvariantError: If the extended plan is not a valid continuation
        """
        plan_id, snapshot = self._require_plan()
        extended = adopt_extended_plan(snapshot, await service.extend(snapshot, weeks_to_add))
        result = await self._synchronizer.commit(plan_id, snapshot, extended, self._apply, action="extend")
        if not result.success:
            return DispatchResult(success=False, plan=result.plan, notice=result.notice)
        self.timer.recover(extended)
        return DispatchResult(success=True, plan=extended)

    async def regenerate(self, service: PlanGenerationService, profile_context: dict[str, Any]) -> Plan:
        """Replace the current plan with a freshly generated one.

        The previous plan (if any) is archived to history first.

        Raises:
            PlanServiceError: If generation fails
            PlanInvariantError: If the generated plan is malformed
            PersistenceError: If the store rejects the write
        """
        plan = adopt_generated_plan(await service.generate(profile_context))
        if self.plan_id is not None:
            await self.store.archive_and_delete(self.plan_id)
        stored = await self.store.create(self.user_id, plan)

        self.plan_id = stored.plan_id
        self.plan = stored.plan
        self.timer = ExecutionTimerController(self.clock)
        self.timer.load(stored.plan)
        logger.bind(user_id=self.user_id, plan_id=stored.plan_id).info("Plan regenerated")
        return stored.plan

    async def delete(self) -> None:
        """Archive the current plan and drop it from the session.

        Raises:
            PlanNotFoundError: If there is no plan loaded
            PersistenceError: If the store rejects the archive
        """
        plan_id, _ = self._require_plan()
        await self.store.archive_and_delete(plan_id)
        self.plan_id = None
        self.plan = None
        self.timer = ExecutionTimerController(self.clock)
        logger.bind(user_id=self.user_id, plan_id=plan_id).info("Plan deleted")
