"""Tests for optimistic persistence with rollback."""

import pytest

from kaamyab.persistence.store import InMemoryPlanStore
from kaamyab.persistence.synchronizer import SAVE_FAILED_NOTICE, PersistenceSynchronizer
from kaamyab.plans.errors import PersistenceError
from kaamyab.plans.moves import NewTask, add_task
from kaamyab.plans.types import Plan


class FlakyPlanStore(InMemoryPlanStore):
    """In-memory store whose writes can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    async def update(self, plan_id: str, plan: Plan) -> None:
        if self.fail_writes:
            raise PersistenceError("connection reset")
        await super().update(plan_id, plan)


@pytest.mark.asyncio
async def test_successful_write_keeps_new_plan(make_plan):
    store = FlakyPlanStore()
    stored = await store.create("user-1", make_plan(["a"]))
    updated = add_task(stored.plan, 0, NewTask(title="b", estimated_hours=1))
    current: list[Plan] = []

    result = await PersistenceSynchronizer(store).commit(stored.plan_id, stored.plan, updated, current.append)

    assert result.success
    assert result.plan == updated
    assert current == [updated]
    assert (await store.get("user-1")).plan.task_count == 2


@pytest.mark.asyncio
async def test_failed_write_rolls_back_to_snapshot(make_plan):
    store = FlakyPlanStore()
    stored = await store.create("user-1", make_plan(["a"]))
    updated = add_task(stored.plan, 0, NewTask(title="b", estimated_hours=1))
    store.fail_writes = True
    current: list[Plan] = []

    result = await PersistenceSynchronizer(store).commit(stored.plan_id, stored.plan, updated, current.append)

    assert not result.success
    assert result.notice == SAVE_FAILED_NOTICE
    # applied optimistically, then reverted
    assert current == [updated, stored.plan]
    assert result.plan == stored.plan
    assert (await store.get("user-1")).plan.task_count == 1


class BrokenPlanStore(InMemoryPlanStore):
    async def update(self, plan_id: str, plan: Plan) -> None:
        raise TypeError("Object of type set is not JSON serializable")


@pytest.mark.asyncio
async def test_unexpected_store_error_rolls_back_and_propagates(make_plan):
    store = BrokenPlanStore()
    stored = await store.create("user-1", make_plan(["a"]))
    updated = add_task(stored.plan, 0, NewTask(title="b", estimated_hours=1))
    current: list[Plan] = []

    with pytest.raises(TypeError):
        await PersistenceSynchronizer(store).commit(stored.plan_id, stored.plan, updated, current.append)

    assert current == [updated, stored.plan]
