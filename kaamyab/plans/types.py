"""Canonical plan document schema.

Plan → weeks → tasks, as stored in the persisted JSON document.

Rules:
- ``execution_state`` is the only stored lifecycle field
- ``completed`` is a read-only projection, emitted on serialization for
  older readers and ignored on input (legacy documents are mapped onto
  ``execution_state`` instead)
- Models are frozen; every change produces a new Plan value
- Unknown fields (explanations, strategic context, milestones) pass
  through untouched
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from kaamyab.plans.errors import TaskNotFoundError, WeekNotFoundError


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


PRIORITY_WEIGHT: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class ExecutionState(StrEnum):
    PENDING = "pending"
    DOING = "doing"
    DONE = "done"


@dataclass(frozen=True, order=True)
class TaskRef:
    """Position of a task in the plan (0-based week index, 0-based task index)."""

    week_index: int
    task_index: int


def _legacy_execution_state(data: dict[str, Any]) -> str:
    explicit = data.get("execution_state")
    if explicit in (ExecutionState.DOING, ExecutionState.DONE):
        return str(explicit)
    legacy_status = data.get("execution_status")
    if legacy_status == "doing":
        return ExecutionState.DOING
    if legacy_status == "done" or data.get("completed") is True:
        return ExecutionState.DONE
    # "idle", "paused", "pending" and missing all collapse to pending
    return ExecutionState.PENDING


class Task(BaseModel):
    """Atomic unit of work with a lifecycle.

    Attributes:
        title: Task title
        priority: High, Medium or Low
        estimated_hours: Positive effort estimate
        execution_state: pending, doing or done (source of truth)
        completed_at: Set only when done
        scheduled_at: Optional calendar slot (calendar sync or manual)
        execution_started_at: Set only while doing
        time_spent_seconds: Accumulated timed work, never decreases
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    title: str
    priority: Priority = Priority.MEDIUM
    estimated_hours: float = Field(default=1.0, gt=0)
    execution_state: ExecutionState = ExecutionState.PENDING
    completed_at: datetime | None = None
    scheduled_at: datetime | None = None
    execution_started_at: datetime | None = None
    time_spent_seconds: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _map_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["execution_state"] = _legacy_execution_state(data)
        data.pop("execution_status", None)
        data.pop("completed", None)
        if data.get("time_spent_seconds") is None:
            data.pop("time_spent_seconds", None)
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed(self) -> bool:
        return self.execution_state == ExecutionState.DONE

    @property
    def is_done(self) -> bool:
        return self.execution_state == ExecutionState.DONE

    @property
    def is_doing(self) -> bool:
        return self.execution_state == ExecutionState.DOING


class Week(BaseModel):
    """Ordered container of tasks.

    Serialized as ``week`` for the week number to stay compatible with
    stored documents.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    week_number: int = Field(alias="week", ge=1)
    focus: str = ""
    tasks: tuple[Task, ...] = ()

    @property
    def is_complete(self) -> bool:
        return all(task.is_done for task in self.tasks)

    def with_tasks(self, tasks: list[Task] | tuple[Task, ...]) -> "Week":
        return self.model_copy(update={"tasks": tuple(tasks)})


class Plan(BaseModel):
    """The full multi-week plan document.

    Strategic fields (objective, risks, milestones, ...) are opaque
    pass-through extras and are never processed by the core.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    overview: str = ""
    total_weeks: int = 0
    weeks: tuple[Week, ...] = ()
    motivation: tuple[str, ...] = ()
    is_open_ended: bool = False
    identity_statement: str | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Plan":
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def get_week(self, week_index: int) -> Week:
        if week_index < 0 or week_index >= len(self.weeks):
            raise WeekNotFoundError(week_index)
        return self.weeks[week_index]

    def get_task(self, ref: TaskRef) -> Task:
        week = self.get_week(ref.week_index)
        if ref.task_index < 0 or ref.task_index >= len(week.tasks):
            raise TaskNotFoundError(ref.week_index, ref.task_index)
        return week.tasks[ref.task_index]

    def iter_tasks(self) -> Iterator[tuple[TaskRef, Week, Task]]:
        for week_index, week in enumerate(self.weeks):
            for task_index, task in enumerate(week.tasks):
                yield TaskRef(week_index, task_index), week, task

    def find_doing(self) -> tuple[TaskRef, Task] | None:
        """First task in document order whose state is doing."""
        for ref, _, task in self.iter_tasks():
            if task.is_doing:
                return ref, task
        return None

    def replace_week(self, week_index: int, week: Week) -> "Plan":
        self.get_week(week_index)
        weeks = list(self.weeks)
        weeks[week_index] = week
        return self.model_copy(update={"weeks": tuple(weeks)})

    def replace_task(self, ref: TaskRef, task: Task) -> "Plan":
        self.get_task(ref)
        week = self.weeks[ref.week_index]
        tasks = list(week.tasks)
        tasks[ref.task_index] = task
        return self.replace_week(ref.week_index, week.with_tasks(tasks))

    @property
    def task_count(self) -> int:
        return sum(len(week.tasks) for week in self.weeks)

    @property
    def is_complete(self) -> bool:
        """Every task in every week is done (False for a plan with no tasks)."""
        return self.task_count > 0 and all(week.is_complete for week in self.weeks)


class ActiveTimer(BaseModel):
    """The at-most-one running timer, rebuilt from the doing task on load."""

    model_config = ConfigDict(frozen=True)

    week_index: int
    task_index: int
    task_title: str
    started_at: datetime

    @property
    def ref(self) -> TaskRef:
        return TaskRef(self.week_index, self.task_index)
