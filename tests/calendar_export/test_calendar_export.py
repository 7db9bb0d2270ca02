"""Tests for calendar entries and the suggested week schedule."""

from datetime import date, datetime, timedelta

from kaamyab.calendar.export import get_calendar_entries, suggest_week_schedule, week_start_date
from kaamyab.plans.types import TaskRef

DONE = {"title": "done", "execution_state": "done", "completed_at": "2025-03-10T09:00:00+05:00"}


def test_entries_only_for_scheduled_tasks(make_plan, now):
    plan = make_plan(["a", {"title": "b", "scheduled_at": now.isoformat(), "estimated_hours": 1.5}])

    entries = get_calendar_entries(plan)

    assert len(entries) == 1
    assert entries[0].ref == TaskRef(0, 1)
    assert entries[0].title == "b"
    assert entries[0].ends_at == entries[0].scheduled_at + timedelta(minutes=90)


def test_week_start_is_next_monday():
    # Wednesday
    assert week_start_date(1, date(2025, 3, 12)) == date(2025, 3, 17)
    assert week_start_date(2, date(2025, 3, 12)) == date(2025, 3, 24)
    # Monday
    assert week_start_date(1, date(2025, 3, 17)) == date(2025, 3, 17)


def test_suggested_schedule_skips_done_and_uses_priority_hours(make_plan):
    plan = make_plan([{"title": "a", "priority": "High"}, DONE, {"title": "c", "priority": "Low"}])

    entries = suggest_week_schedule(plan.weeks[0], 0, date(2025, 3, 17))

    assert [(e.title, e.scheduled_at) for e in entries] == [
        ("a", datetime(2025, 3, 17, 9, 0)),
        ("c", datetime(2025, 3, 18, 14, 0)),
    ]
    assert entries[1].ref == TaskRef(0, 2)


def test_suggested_schedule_wraps_after_friday(make_plan):
    plan = make_plan([f"t{i}" for i in range(6)])
    entries = suggest_week_schedule(plan.weeks[0], 0, date(2025, 3, 17))
    assert entries[5].scheduled_at.date() == date(2025, 3, 17)
