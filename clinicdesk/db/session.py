"""Engine and session factory for the key-value substrate."""

import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from clinicdesk.core.config import settings


def build_engine(database_url: str | None = None, **kwargs) -> Engine:
    """Create an engine, making sure a SQLite file has a directory to live in.

    Args:
        database_url: SQLAlchemy URL (defaults to settings.database_url)
        **kwargs: Passed through to :func:`sqlalchemy.create_engine`

    Returns:
        Configured engine
    """
    url = make_url(database_url or settings.database_url)

    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        db_dir = os.path.dirname(url.database) or "."
        os.makedirs(db_dir, exist_ok=True)

    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )
