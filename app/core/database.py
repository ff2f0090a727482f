"""Database engine and session factory construction."""

import logging

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the engine for DATABASE_URL.

    PostgreSQL connections get a bounded pool, an acquisition timeout and a
    server-side statement_timeout so no call can hang indefinitely.
    """
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        # In-memory sqlite must share one connection across threads
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.DEBUG, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        pool_timeout=settings.DB_POOL_TIMEOUT_SEC,
        echo=settings.DEBUG,
        connect_args={
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        },
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory; sessions are used in `with` blocks so connections always return to the pool."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def check_db_connected(session_factory: sessionmaker[Session]) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning("Database connectivity check failed: %s", type(e).__name__)
        return False
