"""
Database session management using SQLModel.
Provides the engine, table creation and the session dependency for FastAPI routes.
"""

from pathlib import Path
from typing import Generator

from sqlalchemy.engine import make_url
from sqlmodel import Session, SQLModel, create_engine

from photoshare.core.config import settings
from photoshare.core.logging import get_logger

# Imported for their side effect of registering tables on SQLModel.metadata
from photoshare.models.category import Category  # noqa: F401
from photoshare.models.token import PersonalAccessToken  # noqa: F401
from photoshare.models.user import User  # noqa: F401

logger = get_logger(__name__)

if settings.is_sqlite:
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},  # Allow multi-threading for SQLite
    )
else:
    # pool_pre_ping ensures connections are alive before using them
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def _ensure_sqlite_directory() -> None:
    database = make_url(settings.SQLALCHEMY_DATABASE_URI).database
    if settings.is_sqlite and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    """Create all tables that do not exist yet."""
    _ensure_sqlite_directory()
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session
