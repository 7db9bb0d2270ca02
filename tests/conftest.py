"""Root conftest for all tests.

Shared fixtures: a fixed clock and plan builders.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from kaamyab.config.settings import Settings
from kaamyab.core.clock import FixedClock
from kaamyab.persistence.store import InMemoryPlanStore
from kaamyab.plans.types import Plan

# Wednesday morning, fixed offset so "today" is stable regardless of host TZ
LOCAL_TZ = timezone(timedelta(hours=5))
NOW = datetime(2025, 3, 12, 10, 0, tzinfo=LOCAL_TZ)


def _task_doc(task: str | dict[str, Any]) -> dict[str, Any]:
    if isinstance(task, str):
        return {"title": task, "priority": "Medium", "estimated_hours": 1.0}
    doc = {"priority": "Medium", "estimated_hours": 1.0}
    doc.update(task)
    return doc


def build_plan_document(*weeks: list[str | dict[str, Any]], **extra: Any) -> dict[str, Any]:
    """Plan document with one entry per week; tasks are titles or task dicts."""
    document: dict[str, Any] = {
        "overview": "Launch the side project",
        "total_weeks": len(weeks),
        "motivation": ["Small steps every day"],
        "weeks": [
            {"week": number, "focus": f"Week {number} focus", "tasks": [_task_doc(task) for task in tasks]}
            for number, tasks in enumerate(weeks, start=1)
        ],
    }
    document.update(extra)
    return document


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def make_plan():
    """Factory fixture: make_plan(["a", "b"], [{"title": "c", ...}]) -> Plan."""

    def _make(*weeks: list[str | dict[str, Any]], **extra: Any) -> Plan:
        return Plan.from_document(build_plan_document(*weeks, **extra))

    return _make


@pytest.fixture
def make_document():
    return build_plan_document


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def store() -> InMemoryPlanStore:
    return InMemoryPlanStore()
