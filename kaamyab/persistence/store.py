"""Plan document stores.

The core treats remote persistence as a document store keyed by plan id:
``get(user_id)`` returns the user's current plan, ``update(plan_id, plan)``
replaces the whole document. Every write is a whole-document replace, so
a move and a completion issued back to back can never interleave into a
partially written document. Last successful write wins.

Stores raise PlanNotFoundError for missing plans and PersistenceError for
anything else that goes wrong.
"""

import asyncio
import copy
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kaamyab.db.models import PlanHistoryRecord, PlanRecord, StreakRecord
from kaamyab.db.session import get_session_factory, session_scope
from kaamyab.metrics.streak import StreakLog
from kaamyab.plans.errors import PersistenceError, PlanNotFoundError
from kaamyab.plans.types import Plan


@dataclass(frozen=True)
class StoredPlan:
    plan_id: str
    user_id: str
    plan: Plan
    created_at: datetime


class PlanStore(Protocol):
    async def get(self, user_id: str) -> StoredPlan: ...

    async def create(self, user_id: str, plan: Plan) -> StoredPlan: ...

    async def update(self, plan_id: str, plan: Plan) -> None: ...

    async def archive_and_delete(self, plan_id: str) -> None: ...

    async def list_history(self, user_id: str) -> list[StoredPlan]: ...

    async def get_streak(self, user_id: str) -> StreakLog: ...

    async def save_streak(self, user_id: str, log: StreakLog) -> None: ...


@dataclass
class _Row:
    plan_id: str
    user_id: str
    document: dict[str, Any]
    created_at: datetime


class InMemoryPlanStore:
    """Process-local store holding serialized documents.

    Documents are stored as JSON-shaped dicts and re-validated on read, so
    it behaves like the remote store with respect to serialization.
    """

    def __init__(self) -> None:
        self._rows: dict[str, _Row] = {}
        self._history: list[_Row] = []
        self._streaks: dict[str, list[str]] = {}

    def _row_for_user(self, user_id: str) -> _Row:
        for row in self._rows.values():
            if row.user_id == user_id:
                return row
        raise PlanNotFoundError(user_id)

    @staticmethod
    def _to_stored(row: _Row) -> StoredPlan:
        return StoredPlan(row.plan_id, row.user_id, Plan.from_document(copy.deepcopy(row.document)), row.created_at)

    async def get(self, user_id: str) -> StoredPlan:
        return self._to_stored(self._row_for_user(user_id))

    async def create(self, user_id: str, plan: Plan) -> StoredPlan:
        for plan_id in [pid for pid, row in self._rows.items() if row.user_id == user_id]:
            del self._rows[plan_id]
        row = _Row(str(uuid.uuid4()), user_id, plan.to_document(), datetime.now(timezone.utc))
        self._rows[row.plan_id] = row
        return self._to_stored(row)

    async def update(self, plan_id: str, plan: Plan) -> None:
        row = self._rows.get(plan_id)
        if row is None:
            raise PersistenceError(f"Plan {plan_id} does not exist")
        row.document = plan.to_document()

    async def archive_and_delete(self, plan_id: str) -> None:
        row = self._rows.pop(plan_id, None)
        if row is None:
            raise PersistenceError(f"Plan {plan_id} does not exist")
        self._history.append(row)

    async def list_history(self, user_id: str) -> list[StoredPlan]:
        return [self._to_stored(row) for row in reversed(self._history) if row.user_id == user_id]

    async def get_streak(self, user_id: str) -> StreakLog:
        return StreakLog(dates=tuple(date.fromisoformat(d) for d in self._streaks.get(user_id, [])))

    async def save_streak(self, user_id: str, log: StreakLog) -> None:
        self._streaks[user_id] = [d.isoformat() for d in log.dates]


class SqlPlanStore:
    """SQLAlchemy-backed store.

    Database calls are synchronous and run in a worker thread so the event
    loop never blocks on I/O. Without an explicit factory the store binds
    to the configured DATABASE_URL.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory if session_factory is not None else get_session_factory()

    async def _run(self, operation: str, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            logger.bind(operation=operation, error=str(e)).error("Plan store operation failed")
            raise PersistenceError(f"Could not {operation}: {e}") from e

    @staticmethod
    def _to_stored(record: PlanRecord | PlanHistoryRecord, plan_id: str) -> StoredPlan:
        return StoredPlan(plan_id, record.user_id, Plan.from_document(record.plan_json), record.created_at)

    def _get_sync(self, user_id: str) -> StoredPlan:
        with session_scope(self._session_factory) as session:
            record = session.execute(select(PlanRecord).where(PlanRecord.user_id == user_id)).scalar_one_or_none()
            if record is None:
                raise PlanNotFoundError(user_id)
            return self._to_stored(record, record.id)

    async def get(self, user_id: str) -> StoredPlan:
        return await self._run("load plan", self._get_sync, user_id)

    def _create_sync(self, user_id: str, plan: Plan) -> StoredPlan:
        with session_scope(self._session_factory) as session:
            session.execute(delete(PlanRecord).where(PlanRecord.user_id == user_id))
            record = PlanRecord(id=str(uuid.uuid4()), user_id=user_id, plan_json=plan.to_document())
            session.add(record)
            session.flush()
            return self._to_stored(record, record.id)

    async def create(self, user_id: str, plan: Plan) -> StoredPlan:
        return await self._run("create plan", self._create_sync, user_id, plan)

    def _update_sync(self, plan_id: str, plan: Plan) -> None:
        with session_scope(self._session_factory) as session:
            record = session.get(PlanRecord, plan_id)
            if record is None:
                raise PersistenceError(f"Plan {plan_id} does not exist")
            record.plan_json = plan.to_document()
            record.updated_at = datetime.now(timezone.utc)

    async def update(self, plan_id: str, plan: Plan) -> None:
        await self._run("save plan", self._update_sync, plan_id, plan)

    def _archive_sync(self, plan_id: str) -> None:
        with session_scope(self._session_factory) as session:
            record = session.get(PlanRecord, plan_id)
            if record is None:
                raise PersistenceError(f"Plan {plan_id} does not exist")
            session.add(
                PlanHistoryRecord(
                    plan_id=record.id,
                    user_id=record.user_id,
                    plan_json=record.plan_json,
                    created_at=record.created_at,
                )
            )
            session.delete(record)

    async def archive_and_delete(self, plan_id: str) -> None:
        await self._run("archive plan", self._archive_sync, plan_id)

    def _history_sync(self, user_id: str) -> list[StoredPlan]:
        with session_scope(self._session_factory) as session:
            records = session.execute(
                select(PlanHistoryRecord)
                .where(PlanHistoryRecord.user_id == user_id)
                .order_by(PlanHistoryRecord.archived_at.desc())
            ).scalars()
            return [self._to_stored(record, record.plan_id) for record in records]

    async def list_history(self, user_id: str) -> list[StoredPlan]:
        return await self._run("list plan history", self._history_sync, user_id)

    def _get_streak_sync(self, user_id: str) -> StreakLog:
        with session_scope(self._session_factory) as session:
            record = session.get(StreakRecord, user_id)
            if record is None:
                return StreakLog()
            return StreakLog(dates=tuple(date.fromisoformat(d) for d in record.dates))

    async def get_streak(self, user_id: str) -> StreakLog:
        return await self._run("load streak", self._get_streak_sync, user_id)

    def _save_streak_sync(self, user_id: str, log: StreakLog) -> None:
        with session_scope(self._session_factory) as session:
            record = session.get(StreakRecord, user_id)
            dates = [d.isoformat() for d in log.dates]
            if record is None:
                session.add(StreakRecord(user_id=user_id, dates=dates))
            else:
                record.dates = dates
                record.updated_at = datetime.now(timezone.utc)

    async def save_streak(self, user_id: str, log: StreakLog) -> None:
        await self._run("save streak", self._save_streak_sync, user_id, log)
