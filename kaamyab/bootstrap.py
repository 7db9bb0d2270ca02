"""Process entry point for hosts embedding the execution core.

Call ``bootstrap()`` once at startup, then ``open_plan_session`` per user:

    store = bootstrap()
    session = await open_plan_session(store, user_id)
"""

from loguru import logger

from kaamyab.config.settings import settings
from kaamyab.core.clock import Clock
from kaamyab.core.logger import setup_logger_from_settings
from kaamyab.db.session import init_db
from kaamyab.persistence.store import SqlPlanStore
from kaamyab.session import PlanSession


def bootstrap() -> SqlPlanStore:
    """Install log sinks, ensure tables exist and return the SQL store.

    Everything is read from the process settings (LOG_*, DATABASE_URL).
    """
    setup_logger_from_settings(settings)
    init_db()
    logger.info("Kaamyab core ready")
    return SqlPlanStore()


async def open_plan_session(store: SqlPlanStore, user_id: str, clock: Clock | None = None) -> PlanSession:
    """Load the user's plan into a session bound to the process settings.

    Raises:
        PlanNotFoundError: If the user has no plan
        PersistenceError: If the store cannot be read
    """
    return await PlanSession.load(store, user_id, clock=clock, settings=settings)
