from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import Settings

Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """Build the engine for the configured database URL."""
    connect_args = {}
    if settings.is_sqlite:
        # Requests are served from a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.database_url,
        echo=settings.database_echo,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Yield a request-scoped session from the factory built in the app lifespan."""
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()
