"""Ticket Store - Persistent storage for tickets and board columns."""

from ticketflow.store.exceptions import (
    StoreError,
    TicketNotFoundError,
    UniqueViolationError,
    UnknownColumnError,
    is_unique_violation,
    is_unknown_column_error,
)
from ticketflow.store.models import (
    DEFAULT_COLUMNS,
    ColumnId,
    KanbanColumn,
    NewTicket,
    Relocation,
    Ticket,
)
from ticketflow.store.store import TicketStore

__all__ = [
    "DEFAULT_COLUMNS",
    "ColumnId",
    "KanbanColumn",
    "NewTicket",
    "Relocation",
    "StoreError",
    "Ticket",
    "TicketNotFoundError",
    "TicketStore",
    "UniqueViolationError",
    "UnknownColumnError",
    "is_unique_violation",
    "is_unknown_column_error",
]
