"""Engine and session setup for the relational store."""
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from calculation_api.common.errors import StorageError
from calculation_api.common.logger import logger
from calculation_api.storage.orm import Base


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across the server's worker threads, and an
    in-memory SQLite database is kept on a single connection so every session
    sees the same data.

    :param str database_url: SQLAlchemy database URL
    :param bool echo: Log every SQL statement

    :return: SQLAlchemy engine
    :rtype: Engine
    """
    url = make_url(database_url)
    kwargs: Dict[str, Any] = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def init_db(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """
    Connect to the database, create missing tables and return a session factory.

    :param str database_url: SQLAlchemy database URL
    :param bool echo: Log every SQL statement

    :return: Session factory bound to the engine
    :rtype: sessionmaker
    :raises StorageError: If the database cannot be reached or the schema cannot be created
    """
    try:
        engine = build_engine(database_url, echo=echo)
    except SQLAlchemyError as exc:
        raise StorageError(f"invalid database url: {exc}") from exc
    except ImportError as exc:
        # Driver for the URL's dialect is not installed, e.g. psycopg2 without the postgres extra
        raise StorageError(f"database driver not installed: {exc}") from exc

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        engine.dispose()
        raise StorageError(f"could not initialise database: {exc}") from exc

    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    # Records are read after the session commits
    return sessionmaker(bind=engine, expire_on_commit=False)
