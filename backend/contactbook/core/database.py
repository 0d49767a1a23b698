"""
Database configuration and session management
"""
import logging
import re
import time
from contextlib import contextmanager
from typing import Generator, Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from contactbook.core.config import Settings
from contactbook.core.exceptions import StoreConnectionError
from contactbook.core.logging_config import LoggingConfig
from contactbook.core.metrics import db_queries_total, db_query_duration_seconds

logger = LoggingConfig.get_logger(__name__)

# Base class for models
Base = declarative_base()

_TABLE_PATTERNS = {
    "select": re.compile(r"\bFROM\s+([\w.\"]+)", re.IGNORECASE),
    "insert": re.compile(r"\bINTO\s+([\w.\"]+)", re.IGNORECASE),
    "update": re.compile(r"^\s*UPDATE\s+([\w.\"]+)", re.IGNORECASE),
    "delete": re.compile(r"\bFROM\s+([\w.\"]+)", re.IGNORECASE),
}


def _statement_labels(statement: str):
    """Return (operation, table) labels for a SQL statement"""
    words = statement.strip().split(None, 1)
    operation = words[0].lower() if words else "unknown"
    table = "unknown"
    pattern = _TABLE_PATTERNS.get(operation)
    if pattern:
        found = pattern.search(statement)
        if found:
            table = found.group(1).strip('"').lower()
    return operation, table


def _setup_db_metrics(engine: Engine):
    """Setup SQLAlchemy event listeners for database metrics"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if conn.info.get('query_start_time'):
            duration = time.time() - conn.info['query_start_time'].pop()
            operation, table = _statement_labels(statement)
            db_queries_total.labels(operation=operation, table=table).inc()
            db_query_duration_seconds.labels(operation=operation, table=table).observe(duration)


class Database:
    """
    Store handle: one engine plus its session factory.

    Constructed explicitly by the application factory and handed to the
    repositories; disposed at shutdown.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        connect_timeout: int = 5,
        echo: bool = False,
    ):
        self.url = url

        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {
                "timeout": connect_timeout,
                "check_same_thread": False,
            }
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow
            engine_kwargs["connect_args"] = {"connect_timeout": connect_timeout}

        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

        if not echo:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        _setup_db_metrics(self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a store handle from application settings"""
        return cls(
            settings.sqlalchemy_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            connect_timeout=settings.database_connect_timeout,
            echo=settings.log_sqlalchemy,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session scoped to a single repository call"""
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def verify_connection(self):
        """
        Run a trivial statement against the store.

        Raises:
            StoreConnectionError: if the store cannot be reached
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(
                "Database connection failed",
                exc_info=True,
                extra={"database_url": self.engine.url.render_as_string(hide_password=True)},
            )
            raise StoreConnectionError(str(e)) from e

    def create_tables(self):
        """Create all tables registered on Base.metadata"""
        import contactbook.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        import contactbook.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    database: Database = request.app.state.database
    with database.session() as db:
        yield db
