from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlanRecord(Base):
    """Current plan document per user.

    The plan itself is one JSON document, replaced wholesale on every
    write. There is at most one row per user at a time.

    Stores:
    - id: Plan ID (string UUID format)
    - user_id: Owner
    - plan_json: Serialized Plan document
    - created_at: When the plan was generated
    - updated_at: Last successful write
    """

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    plan_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))


class PlanHistoryRecord(Base):
    """Archived plans. A plan is copied here before it is deleted."""

    __tablename__ = "plan_history"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    plan_id: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    plan_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    archived_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (Index("idx_plan_history_user_archived", "user_id", "archived_at"),)


class StreakRecord(Base):
    """Completion-date log per user (ISO dates, ascending)."""

    __tablename__ = "streak_logs"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
