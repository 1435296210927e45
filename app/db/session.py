"""
Database session management.

Provides SQLModel engine and session creation.
"""

from typing import Generator

from sqlmodel import Session, create_engine

from app.core.config import settings

DATABASE_URL: str = settings.database_url

if DATABASE_URL.startswith("sqlite"):
    _engine_options: dict = {"connect_args": {"check_same_thread": False}}
else:
    _engine_options = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 5,  # Connection pool size
        "max_overflow": 10,  # Max connections beyond pool_size
    }

# Create database engine
engine = create_engine(DATABASE_URL, echo=settings.DEBUG, **_engine_options)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Yields:
        SQLModel Session instance
    """
    with Session(engine) as session:
        yield session
