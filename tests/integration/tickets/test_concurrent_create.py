"""Integration tests for concurrent ticket creation against one database file."""

import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from ticketflow.store import TicketStore
from ticketflow.tickets import TicketLifecycle


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    TicketStore(path).close()
    yield path
    for suffix in ("", "-wal", "-shm"):
        Path(f"{path}{suffix}").unlink(missing_ok=True)


def create_in_own_store(db_path: str, title: str, body: str, barrier: threading.Barrier):
    """Create one ticket through a store instance of its own, like a separate process."""
    store = TicketStore(db_path)
    try:
        lifecycle = TicketLifecycle(store, default_repository="acme/web")
        barrier.wait()
        return lifecycle.create(title, body)
    finally:
        store.close()


@pytest.mark.integration
class TestConcurrentCreate:
    """Creators racing on the same repository get distinct numbers."""

    def test_two_creators(self, temp_db_path: str, ready_body: str) -> None:
        barrier = threading.Barrier(2)

        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [
                pool.submit(create_in_own_store, temp_db_path, title, ready_body, barrier)
                for title in ("First", "Second")
            ]
            results = [f.result() for f in futures]

        assert sorted(r.display_id for r in results) == ["ACME-0001", "ACME-0002"]
        assert all(r.moved_to_todo for r in results)

    def test_many_creators(self, temp_db_path: str, ready_body: str) -> None:
        workers = 6
        barrier = threading.Barrier(workers)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(create_in_own_store, temp_db_path, f"Ticket {i}", ready_body, barrier)
                for i in range(workers)
            ]
            results = [f.result() for f in futures]

        numbers = sorted(r.sequence_number for r in results)
        assert numbers == list(range(1, workers + 1))

        store = TicketStore(temp_db_path)
        todo = store.list_column("todo", "acme/web")
        store.close()
        assert len(todo) == workers
