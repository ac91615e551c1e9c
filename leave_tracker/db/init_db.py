"""
Database initialization
"""
import logging

from sqlalchemy.engine import Engine

from leave_tracker.db.base import Base

logger = logging.getLogger(__name__)


def init_db(bind: Engine) -> None:
    """
    Create all tables that do not exist yet

    Model modules must be imported before this runs so that they are
    registered on Base.metadata.
    """
    import leave_tracker.models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
