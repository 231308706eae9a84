"""Resolution of ticket references and column names against the store.

The store may still run the legacy schema (one global zero-padded ``id``, no
repository scoping). Lookups try the repository-scoped form first and fall
back to the legacy form only when the store reports an unknown column.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol, TypeVar

from ticketflow.store.exceptions import UnknownColumnError
from ticketflow.store.models import ColumnId
from ticketflow.tickets.exceptions import ColumnNotFoundError
from ticketflow.tickets.identifiers import format_legacy_id

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ticketflow.store.models import KanbanColumn, Ticket
    from ticketflow.store.store import TicketStore

logger = logging.getLogger("ticketflow.resolution")

T = TypeVar("T")

# Normalized alias -> column id
COLUMN_ALIASES = {
    "to do": ColumnId.TODO.value,
    "todo": ColumnId.TODO.value,
    "ready to do": ColumnId.TODO.value,
    "ready": ColumnId.TODO.value,
    "qa": ColumnId.QA.value,
    "ready for qa": ColumnId.QA.value,
    "human": ColumnId.HUMAN_IN_THE_LOOP.value,
    "hitl": ColumnId.HUMAN_IN_THE_LOOP.value,
    "human in the loop": ColumnId.HUMAN_IN_THE_LOOP.value,
    "wont implement": ColumnId.WILL_NOT_IMPLEMENT.value,
    "will not implement": ColumnId.WILL_NOT_IMPLEMENT.value,
    "wont do": ColumnId.WILL_NOT_IMPLEMENT.value,
    "unassigned": ColumnId.UNASSIGNED.value,
    "backlog": ColumnId.UNASSIGNED.value,
}


def schema_fallback(primary: Callable[[], T], legacy: Callable[[], T]) -> T:
    """Run ``primary``; run ``legacy`` instead if the schema lacks a column it needs."""
    try:
        return primary()
    except UnknownColumnError as e:
        logger.debug("Falling back to legacy schema: %s", e)
        return legacy()


class TicketResolver(Protocol):
    """Looks a ticket up by its sequence number."""

    def resolve(self, number: int) -> Ticket: ...


class RepositoryScopedResolver:
    """Resolves ``(repository, number)`` on the repository-scoped schema."""

    def __init__(self, store: TicketStore, repository: str) -> None:
        self.store = store
        self.repository = repository

    def resolve(self, number: int) -> Ticket:
        return self.store.get_by_number(self.repository, number)


class LegacyIdResolver:
    """Resolves the global zero-padded id of the legacy schema."""

    def __init__(self, store: TicketStore) -> None:
        self.store = store

    def resolve(self, number: int) -> Ticket:
        return self.store.get_by_legacy_id(format_legacy_id(number))


def resolve_ticket(store: TicketStore, number: int, repository: str) -> Ticket:
    """Find a ticket, scoped to ``repository`` when the schema allows it.

    Raises:
        TicketNotFoundError: If no ticket matches.
    """
    return schema_fallback(
        lambda: RepositoryScopedResolver(store, repository).resolve(number),
        lambda: LegacyIdResolver(store).resolve(number),
    )


def _column_key(name: str) -> str:
    key = name.strip().lower()
    if key.startswith("col-"):
        key = key[4:]
    key = key.replace("'", "").replace("’", "")
    return re.sub(r"[\s\-_]+", " ", key).strip()


def resolve_column(columns: Sequence[KanbanColumn], name: str) -> KanbanColumn:
    """Match a column by id (``col-`` prefix optional), title or alias.

    Raises:
        ColumnNotFoundError: If nothing matches.
    """
    key = _column_key(name)
    for column in columns:
        if key in (_column_key(column.id), _column_key(column.title)):
            return column

    alias = COLUMN_ALIASES.get(key)
    if alias is not None:
        for column in columns:
            if column.id == alias:
                return column

    known = ", ".join(column.title for column in columns)
    raise ColumnNotFoundError(f"Column '{name}' not found. Known columns: {known}")
