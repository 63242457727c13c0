"""SQLAlchemy engine and session plumbing.

The engine is built once by the application factory and kept on
``app.state``; request handlers receive sessions through :func:`get_db`.
"""

from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# ``Base`` is the parent class for every SQLAlchemy model defined in radio_registry/models.
Base = declarative_base()


def build_engine(url: str) -> Engine:
    """Create an engine, applying the SQLite tweaks FastAPI's thread pool needs."""

    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live inside a single connection, so every session
    # has to share it.
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency that yields a session and guarantees cleanup."""

    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
