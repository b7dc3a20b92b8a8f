"""SQLAlchemy engine factory and session class.

* ``create_notebridge_engine``  -- Create a SA engine from a URL.
* ``NotebridgeSession``         -- Session with ``expire_on_commit=False``.
* ``session_factory``           -- ``sessionmaker`` bound to an engine.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def create_notebridge_engine(
    url: str = "sqlite:///notebridge.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql+psycopg://…``, etc.)
    echo:
        If ``True``, log all SQL.
    pool_size, max_overflow:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        # an in-memory database only lives as long as its single connection
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs.setdefault("poolclass", StaticPool)

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    pool_kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class NotebridgeSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Serializers read attributes after the request transaction commits;
    expiring them would trigger lazy reloads on a closed session.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def session_factory(engine: Engine) -> sessionmaker[NotebridgeSession]:
    """Return a ``sessionmaker`` bound to *engine*."""
    return sessionmaker(bind=engine, class_=NotebridgeSession)
