"""Engine factory and request-scoped sessions"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from budgetwise.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite (local runs and the test suite) gets a thread-agnostic connection
    and no pool sizing; server databases use the pool limits from settings.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle_seconds,
    )


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Yield a session per request and close it afterwards"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
