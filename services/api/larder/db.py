"""Engine and session wiring.

The engine is created lazily from `settings.database_url` on first use, so
importing the app (or the models, for Alembic) never opens a connection.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from .settings import settings


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql") and settings.db_statement_timeout_ms:
        # Applies to every catalog read issued by a conversion
        return {"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"}
    return {}


def init_engine(database_url: str | None = None) -> Engine:
    global _engine, _session_factory
    url = database_url or settings.database_url
    _engine = create_engine(url, pool_pre_ping=True, connect_args=_connect_args(url))
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        init_engine()
    return _session_factory


def get_db():
    db = session_factory()()
    try:
        yield db
    finally:
        db.close()
