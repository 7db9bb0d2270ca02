"""Optimistic persistence.

Every mutation follows the same path:

1. Snapshot the current plan
2. Apply the new plan locally (the UI reflects intent immediately)
3. Write the whole document to the store
4. On failure, re-apply the snapshot and report a transient notice

There is no retry loop; retrying is the caller's decision.
"""

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from kaamyab.persistence.store import PlanStore
from kaamyab.plans.errors import PersistenceError
from kaamyab.plans.types import Plan

SAVE_FAILED_NOTICE = "Your changes weren't saved. Please try again."


@dataclass(frozen=True)
class SyncResult:
    """Outcome of an optimistic write.

    Attributes:
        success: Whether the store accepted the write
        plan: The plan now held locally (new plan, or the snapshot after rollback)
        notice: Transient, recoverable message for the user on failure
    """

    success: bool
    plan: Plan
    notice: str | None = None


class PersistenceSynchronizer:
    def __init__(self, store: PlanStore) -> None:
        self._store = store

    async def commit(
        self,
        plan_id: str,
        snapshot: Plan,
        updated: Plan,
        apply: Callable[[Plan], None],
        action: str = "update",
    ) -> SyncResult:
        """Apply ``updated`` locally, persist it, roll back to ``snapshot`` on failure.

        Args:
            plan_id: Document id
            snapshot: Plan as it was immediately before the mutation
            updated: Plan after the mutation
            apply: Callback that installs a plan as the local current value
            action: Label for logs

        Returns:
            SyncResult describing what the local plan ended up as

        Raises:
            Exception: Anything other than PersistenceError from the store,
                re-raised after the snapshot is restored
        """
        apply(updated)
        try:
            await self._store.update(plan_id, updated)
        except PersistenceError as e:
            apply(snapshot)
            logger.bind(plan_id=plan_id, action=action, error=e.reason).warning("Plan write failed, rolled back")
            return SyncResult(success=False, plan=snapshot, notice=SAVE_FAILED_NOTICE)
        except BaseException:
            # unexpected store failure or cancellation: restore, then propagate
            apply(snapshot)
            logger.bind(plan_id=plan_id, action=action).exception("Plan write raised, rolled back")
            raise

        logger.bind(plan_id=plan_id, action=action).debug("Plan write committed")
        return SyncResult(success=True, plan=updated)
