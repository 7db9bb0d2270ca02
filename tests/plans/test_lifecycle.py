"""Tests for adopting generated and extended plans."""

import pytest

from kaamyab.plans.errors import PlanInvariantError
from kaamyab.plans.invariants import count_doing_tasks
from kaamyab.plans.lifecycle import adopt_extended_plan, adopt_generated_plan, merge_extension_weeks
from kaamyab.plans.lock import get_locked_week_indices
from kaamyab.plans.types import ExecutionState, Plan

DONE = {"title": "done", "execution_state": "done", "completed_at": "2025-03-10T09:00:00+05:00"}


def test_generated_plan_starts_pending(make_plan):
    generated = make_plan([DONE, {"title": "b", "time_spent_seconds": 120}])

    plan = adopt_generated_plan(generated)

    for _, _, task in plan.iter_tasks():
        assert task.execution_state == ExecutionState.PENDING
        assert task.completed_at is None
        assert task.time_spent_seconds == 0


def test_generated_plan_fills_total_weeks(make_document):
    document = make_document(["a"], ["b"])
    document["total_weeks"] = 0
    assert adopt_generated_plan(Plan.from_document(document)).total_weeks == 2


def test_generated_plan_with_bad_numbering_rejected(make_document):
    document = make_document(["a"], ["b"])
    document["weeks"][0]["week"] = 2
    with pytest.raises(PlanInvariantError):
        adopt_generated_plan(Plan.from_document(document))


def test_merge_extension_appends_locked_weeks(make_plan):
    existing = make_plan([DONE], ["b"])

    extended = merge_extension_weeks(
        existing,
        [{"week": 3, "focus": "Scale", "tasks": [{"title": "c", "estimated_hours": 2}]}],
    )

    adopted = adopt_extended_plan(existing, extended)
    assert adopted.total_weeks == 3
    assert adopted.weeks[2].focus == "Scale"
    assert get_locked_week_indices(adopted) == {2}


def test_extension_must_add_weeks(make_plan):
    existing = make_plan(["a"])
    with pytest.raises(PlanInvariantError) as exc_info:
        adopt_extended_plan(existing, existing)
    assert exc_info.value.code == "EXTENSION_SHRANK"


def test_extension_cannot_alter_existing_state(make_plan):
    existing = make_plan([DONE], ["b"])
    tampered = make_plan(["done"], ["b"], ["c"])
    with pytest.raises(PlanInvariantError) as exc_info:
        adopt_extended_plan(existing, tampered)
    assert exc_info.value.code == "EXTENSION_ALTERED_STATE"


def test_extension_must_continue_numbering(make_plan, make_document):
    existing = make_plan(["a"])
    document = make_document(["a"], ["b"])
    document["weeks"][1]["week"] = 5
    with pytest.raises(PlanInvariantError) as exc_info:
        adopt_extended_plan(existing, Plan.from_document(document))
    assert exc_info.value.code == "WEEK_NUMBERING"


def test_extension_weeks_from_service_are_reset_to_pending(make_plan, now):
    existing = make_plan(["a"])
    extended = make_plan(
        ["a"],
        [{"title": "x", "execution_state": "doing", "execution_started_at": now.isoformat()}],
        [DONE],
    )

    adopted = adopt_extended_plan(existing, extended)

    assert count_doing_tasks(adopted) == 0
    for week in adopted.weeks[1:]:
        for task in week.tasks:
            assert task.execution_state == ExecutionState.PENDING
            assert task.completed_at is None
            assert task.execution_started_at is None
    assert get_locked_week_indices(adopted) == {1, 2}


def test_extension_cannot_alter_existing_timestamps(make_plan):
    existing = make_plan([DONE], ["b"])
    moved_completion = dict(DONE, completed_at="2025-03-11T09:00:00+05:00")
    tampered = make_plan([moved_completion], ["b"], ["c"])
    with pytest.raises(PlanInvariantError) as exc_info:
        adopt_extended_plan(existing, tampered)
    assert exc_info.value.code == "EXTENSION_ALTERED_STATE"
