"""Week lock status.

Lock state is a projection of the plan, recomputed on every read and
never stored. A week's position in the sequence (not its number) decides
its state:

- ACTIVE: first week that still has an unfinished task
- LOCKED: any week after the active week
- PAST: complete weeks before the active week

When every week is complete there is no active week and nothing is locked.
"""

from enum import StrEnum

from kaamyab.plans.types import Plan


class WeekLockState(StrEnum):
    PAST = "past"
    ACTIVE = "active"
    LOCKED = "locked"


def get_active_week_index(plan: Plan) -> int | None:
    """Index of the first incomplete week, or None when all weeks are complete."""
    for index, week in enumerate(plan.weeks):
        if not week.is_complete:
            return index
    return None


def get_week_lock_state(plan: Plan, week_index: int) -> WeekLockState:
    plan.get_week(week_index)
    active_index = get_active_week_index(plan)
    if active_index is None or week_index < active_index:
        return WeekLockState.PAST
    if week_index == active_index:
        return WeekLockState.ACTIVE
    return WeekLockState.LOCKED


def is_week_locked(plan: Plan, week_index: int) -> bool:
    return get_week_lock_state(plan, week_index) == WeekLockState.LOCKED


def get_lock_states(plan: Plan) -> list[WeekLockState]:
    """Lock state for every week, in sequence order."""
    active_index = get_active_week_index(plan)
    states: list[WeekLockState] = []
    for index in range(len(plan.weeks)):
        if active_index is None or index < active_index:
            states.append(WeekLockState.PAST)
        elif index == active_index:
            states.append(WeekLockState.ACTIVE)
        else:
            states.append(WeekLockState.LOCKED)
    return states


def get_locked_week_indices(plan: Plan) -> set[int]:
    return {index for index, state in enumerate(get_lock_states(plan)) if state == WeekLockState.LOCKED}
