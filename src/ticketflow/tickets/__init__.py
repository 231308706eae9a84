"""Ticket Lifecycle - Identifiers, readiness, ordering and migration of tickets."""

from ticketflow.tickets.exceptions import (
    ColumnNotFoundError,
    IdentifierAllocationError,
    InvalidPlacementError,
    InvalidTicketRefError,
    NotInUnassignedError,
    OperationCancelledError,
    PlaceholderError,
    RepositoryNotFoundError,
    SchemaNotSupportedError,
    TicketError,
    TicketPreconditionError,
    TicketValidationError,
)
from ticketflow.tickets.lifecycle import TicketLifecycle
from ticketflow.tickets.models import (
    ChecklistResults,
    CreateResult,
    MigrateResult,
    MoveResult,
    NotReadyTicket,
    ReadinessResult,
    SweepResult,
    UpdateResult,
)
from ticketflow.tickets.normalization import normalize_body
from ticketflow.tickets.placeholders import ensure_no_placeholders, find_placeholders
from ticketflow.tickets.readiness import apply_checkbox_fix, evaluate_readiness

__all__ = [
    "ChecklistResults",
    "ColumnNotFoundError",
    "CreateResult",
    "IdentifierAllocationError",
    "InvalidPlacementError",
    "InvalidTicketRefError",
    "MigrateResult",
    "MoveResult",
    "NotInUnassignedError",
    "NotReadyTicket",
    "OperationCancelledError",
    "PlaceholderError",
    "ReadinessResult",
    "RepositoryNotFoundError",
    "SchemaNotSupportedError",
    "SweepResult",
    "TicketError",
    "TicketLifecycle",
    "TicketPreconditionError",
    "TicketValidationError",
    "UpdateResult",
    "apply_checkbox_fix",
    "ensure_no_placeholders",
    "evaluate_readiness",
    "find_placeholders",
    "normalize_body",
]
