"""Database engine management.

Manifesto:
    One engine per process, created in the lifespan and disposed on
    shutdown.  Tests reset it between apps.

Tags:
    notebridge, core, database, sqlalchemy, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from notebridge.core.logging import get_logger
from notebridge.core.orm import NotebridgeBase
from notebridge.core.orm.session import NotebridgeSession, create_notebridge_engine, session_factory
from notebridge.core.settings import NotebridgeSettings, get_settings

logger = get_logger(__name__)

_engine: Engine | None = None
_sessions: sessionmaker[NotebridgeSession] | None = None


def init_engine(settings: NotebridgeSettings | None = None) -> Engine:
    """Initialize the engine and session factory."""
    global _engine, _sessions
    if _engine is not None:
        return _engine

    settings = settings or get_settings()
    _engine = create_notebridge_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    _sessions = session_factory(_engine)
    logger.info("database_engine_initialized", dialect=_engine.dialect.name)
    return _engine


def get_engine() -> Engine:
    """Get the engine, initializing if needed."""
    if _engine is None:
        return init_engine()
    return _engine


def get_session_factory() -> sessionmaker[NotebridgeSession]:
    if _sessions is None:
        init_engine()
    assert _sessions is not None
    return _sessions


def close_engine() -> None:
    """Dispose the engine."""
    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
        _engine = None
        _sessions = None


def reset_engine() -> None:
    """Reset the engine (for testing)."""
    close_engine()


def create_schema(engine: Engine | None = None) -> None:
    """Create every table that does not exist yet."""
    NotebridgeBase.metadata.create_all(engine or get_engine())


def drop_schema(engine: Engine | None = None) -> None:
    NotebridgeBase.metadata.drop_all(engine or get_engine())


def ping(engine: Engine | None = None) -> bool:
    """Return ``True`` when a trivial query succeeds."""
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:  # noqa: BLE001 - readiness probe reports, never raises
        logger.warning("database_ping_failed", error=str(exc))
        return False


@contextmanager
def session_scope() -> Iterator[NotebridgeSession]:
    """Session that commits on success and rolls back on error."""
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
