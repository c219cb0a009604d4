# infra/db/base.py
from __future__ import annotations
import logging
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from infra.path import default_db_path

logger = logging.getLogger(__name__)

Base = declarative_base()


def resolve_db_url() -> str:
    """PM_DB_URL when set, otherwise a SQLite file under the per-user data dir."""
    override = (os.getenv("PM_DB_URL") or "").strip()
    if override:
        return override
    return f"sqlite:///{default_db_path().as_posix()}"


def make_engine(db_url: str | None = None) -> Engine:
    url = db_url or resolve_db_url()
    logger.info("Using database at: %s", url)
    engine = create_engine(url, echo=False, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(db_url: str | None = None) -> sessionmaker:
    return sessionmaker(bind=make_engine(db_url), autoflush=False, autocommit=False, future=True)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
