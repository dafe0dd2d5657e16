"""
Engine and session factory for the credential store and token ledger.
"""

from typing import Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from blog_api.core.config import settings


def build_engine(database_url: str, sqlite: bool) -> Engine:
    """Create an engine suited to the database backend."""
    if sqlite:
        # Sessions are used from FastAPI's threadpool
        return create_engine(
            database_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(settings.DATABASE_URL, sqlite=settings.is_sqlite)


def init_db(bind: Engine = engine) -> None:
    """Create the users and refresh_tokens tables if missing."""
    # Register both tables on the metadata
    from blog_api.models import token, user  # noqa: F401

    SQLModel.metadata.create_all(bind)


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session
