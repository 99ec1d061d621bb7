"""
Database connection and session management for saved calculations.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool

from listing_cashflow.config import get_settings
from listing_cashflow.db.models import Base

logger = logging.getLogger(__name__)
settings = get_settings()


def build_engine(database_url: str):
    """Create an engine suited to the database backend."""
    if database_url.startswith("postgresql"):
        # Pooling is left to the hosted database
        return create_engine(database_url, poolclass=NullPool)
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create the saved calculation tables if missing."""
    logger.info("Initializing database tables")
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Context manager for database sessions (for use outside FastAPI)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
