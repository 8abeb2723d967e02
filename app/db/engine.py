from collections.abc import Generator

from sqlalchemy import Engine
from sqlmodel import Session, create_engine

from app.core.settings import get_settings


def build_engine(database_url: str) -> Engine:
    """Engine for the users, signup request and refresh token tables."""
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        # SQLite connections are shared with FastAPI's threadpool
        connect_args = {"check_same_thread": False}

    return create_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


engine = build_engine(get_settings().database_url)


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session; uncommitted work is rolled back on exit."""
    with Session(engine) as session:
        yield session
