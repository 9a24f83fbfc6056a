"""Database initialization utilities."""

import logging

from sqlalchemy import Engine

from clinicdesk.db.base import Base
from clinicdesk.models.document import Document  # noqa: F401  (registers the table)

logger = logging.getLogger(__name__)


def create_tables(engine: Engine) -> None:
    """Create all database tables."""
    Base.metadata.create_all(engine)
    logger.info("Database tables created")


def drop_tables(engine: Engine) -> None:
    """Drop all database tables (use with caution)."""
    Base.metadata.drop_all(engine)
    logger.info("Database tables dropped")


def init_db(engine: Engine) -> None:
    """Initialize the substrate so the document store can be used.

    Args:
        engine: Engine of the key-value substrate
    """
    create_tables(engine)
    logger.info("Database initialization complete")
