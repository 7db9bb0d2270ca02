"""Tests for process startup against a file-backed SQLite database."""

import sys

import pytest
from loguru import logger

from kaamyab import bootstrap as bootstrap_module
from kaamyab.bootstrap import bootstrap, open_plan_session
from kaamyab.config.settings import settings
from kaamyab.db import session as db_session
from kaamyab.persistence.store import SqlPlanStore
from kaamyab.plans.types import TaskRef
from kaamyab.session import StartTask


@pytest.fixture
def configured(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{tmp_path / 'kaamyab.db'}")
    monkeypatch.setattr(settings, "log_file", str(tmp_path / "logs" / "kaamyab.log"))
    monkeypatch.setattr(settings, "log_level", "DEBUG")
    monkeypatch.setattr(db_session, "_engine", None)
    monkeypatch.setattr(db_session, "_SessionLocal", None)
    yield tmp_path
    db_session.get_engine().dispose()
    logger.remove()
    logger.add(sys.stderr)


def test_bootstrap_creates_database_and_log_file(configured):
    store = bootstrap()

    assert isinstance(store, SqlPlanStore)
    assert (configured / "kaamyab.db").exists()
    log_text = (configured / "logs" / "kaamyab.log").read_text()
    assert "Logger initialized with level=DEBUG" in log_text
    assert "Database tables verified" in log_text


@pytest.mark.asyncio
async def test_session_round_trip_through_configured_database(configured, make_plan, clock):
    store = bootstrap()
    await store.create("user-1", make_plan(["a", "b"]))

    session = await open_plan_session(store, "user-1", clock)
    result = await session.dispatch(StartTask(TaskRef(0, 1)))

    assert result.success
    assert session.settings is bootstrap_module.settings
    # a second store on the same DATABASE_URL sees the write
    reloaded = await SqlPlanStore().get("user-1")
    assert reloaded.plan.get_task(TaskRef(0, 1)).is_doing
    assert "Plan session loaded" in (configured / "logs" / "kaamyab.log").read_text()
