"""Database connection manager for the Ticket Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, insert, select, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ticketflow.store.models import (
    DEFAULT_COLUMNS,
    Base,
    KanbanColumnRecord,
    legacy_metadata,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

DEFAULT_TIMEOUT = 20.0


class Database:
    """Database connection manager.

    Accepts either a SQLite path (``":memory:"`` for an in-memory database)
    or a full SQLAlchemy URL. SQLite connections run in WAL mode with a busy
    timeout; PostgreSQL connections get a statement timeout. Both bound every
    round-trip by ``timeout`` seconds.
    """

    def __init__(self, db_path: str = "ticketflow.db", timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize database connection.

        Args:
            db_path: SQLite file path, ":memory:", or a SQLAlchemy URL.
            timeout: Upper bound in seconds for a single store call.
        """
        self.db_path = db_path
        self.timeout = timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_sqlite(self) -> bool:
        return "://" not in self.db_path or self.db_path.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = self._create_engine()
            if self.is_sqlite:

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection: Any, _connection_record: object) -> None:
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.close()

        return self._engine

    def _create_engine(self) -> Engine:
        if self.db_path == ":memory:":
            # One shared connection so every session sees the same database
            return create_engine(
                "sqlite:///:memory:",
                echo=False,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False, "timeout": self.timeout},
            )
        if "://" not in self.db_path:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False, "timeout": self.timeout},
            )
        if self.db_path.startswith("postgresql"):
            return create_engine(
                self.db_path,
                echo=False,
                pool_pre_ping=True,
                connect_args={
                    "connect_timeout": int(self.timeout),
                    "options": f"-c statement_timeout={int(self.timeout * 1000)}",
                },
            )
        return create_engine(self.db_path, echo=False, pool_pre_ping=True)

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self, legacy: bool = False) -> None:
        """Create tables if they don't exist and seed the default columns.

        Args:
            legacy: Create the pre-migration layout (global ``id``, no
                repository scoping) instead of the current one.
        """
        if legacy:
            legacy_metadata.create_all(self.engine)
        else:
            Base.metadata.create_all(self.engine)
        self._seed_columns()

    def _seed_columns(self) -> None:
        with self.engine.begin() as conn:
            existing = set(conn.execute(select(KanbanColumnRecord.id)).scalars())
            rows = [
                {"id": column_id, "title": title, "position": index}
                for index, (column_id, title) in enumerate(DEFAULT_COLUMNS)
                if column_id not in existing
            ]
            if rows:
                conn.execute(insert(KanbanColumnRecord), rows)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled (SQLite only)."""
        with self.engine.connect() as conn:
            mode = conn.execute(text("PRAGMA journal_mode")).scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
