"""Integration tests for the Ticket Store database on disk."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import inspect

from ticketflow.store import TicketStore
from ticketflow.store.database import Database
from ticketflow.tickets import TicketLifecycle


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    yield path
    for suffix in ("", "-wal", "-shm"):
        Path(f"{path}{suffix}").unlink(missing_ok=True)


@pytest.fixture
def database(temp_db_path: str):
    """Create a database instance with tables."""
    db = Database(temp_db_path)
    db.create_tables()
    yield db
    db.close()


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for schema creation."""

    def test_tables_created(self, database: Database) -> None:
        inspector = inspect(database.engine)

        assert set(inspector.get_table_names()) >= {"tickets", "kanban_columns"}
        columns = {c["name"] for c in inspector.get_columns("tickets")}
        assert {"repo_full_name", "ticket_number", "display_id", "kanban_position"} <= columns

    def test_wal_mode(self, database: Database) -> None:
        assert database.is_wal_mode()

    def test_nested_directory_created(self, tmp_path: Path) -> None:
        path = tmp_path / "data" / "board.db"

        db = Database(str(path))
        db.create_tables()
        db.close()

        assert path.exists()

    def test_legacy_layout(self, temp_db_path: str) -> None:
        db = Database(temp_db_path)
        db.create_tables(legacy=True)

        columns = {c["name"] for c in inspect(db.engine).get_columns("tickets")}
        db.close()

        assert "repo_full_name" not in columns
        assert "id" in columns

    def test_columns_seeded_once(self, temp_db_path: str) -> None:
        TicketStore(temp_db_path).close()
        store = TicketStore(temp_db_path)

        assert len(store.list_columns()) == 5
        store.close()


@pytest.mark.integration
class TestPersistence:
    """Tests for data surviving a reopen."""

    def test_tickets_survive_reopen(self, temp_db_path: str, ready_body: str) -> None:
        store = TicketStore(temp_db_path)
        TicketLifecycle(store, default_repository="acme/web").create("One", ready_body)
        store.close()

        reopened = TicketStore(temp_db_path)
        lifecycle = TicketLifecycle(reopened, default_repository="acme/web")

        assert lifecycle.create("Two", ready_body).display_id == "ACME-0002"
        assert [t.display_id for t in lifecycle.list_column("todo")] == [
            "ACME-0001",
            "ACME-0002",
        ]
        reopened.close()

    def test_unmigrated_store_keeps_working(self, temp_db_path: str, ready_body: str) -> None:
        """A legacy file opened without the legacy flag falls back to global ids."""
        TicketStore(temp_db_path, legacy_schema=True).close()

        store = TicketStore(temp_db_path)
        lifecycle = TicketLifecycle(store, default_repository="acme/web")
        created = lifecycle.create("One", ready_body)

        assert created.display_id == "0001"
        assert lifecycle.get_ticket(1).title == "One"
        assert lifecycle.list_repositories() == []
        store.close()
