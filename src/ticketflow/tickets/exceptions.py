"""Custom exceptions for the Ticket Lifecycle engine."""

from __future__ import annotations


class TicketError(Exception):
    """Base exception for ticket lifecycle errors."""


class TicketValidationError(TicketError):
    """Input was rejected before any store call."""


class PlaceholderError(TicketValidationError):
    """Body contains unresolved template placeholders."""

    def __init__(self, placeholders: list[str]) -> None:
        self.placeholders = list(placeholders)
        super().__init__(
            "Ticket body contains unresolved template placeholders: "
            + ", ".join(self.placeholders)
            + ". Replace every placeholder with concrete content before saving."
        )


class InvalidTicketRefError(TicketValidationError):
    """Ticket reference is neither a number nor a display id."""


class InvalidPlacementError(TicketValidationError):
    """Requested position is not top, bottom or a non-negative index."""


class TicketPreconditionError(TicketError):
    """Ticket state does not allow the requested operation."""


class NotInUnassignedError(TicketPreconditionError):
    """Ticket is not in the Unassigned column."""


class RepositoryNotFoundError(TicketPreconditionError):
    """Target repository does not exist or is not reachable."""


class ColumnNotFoundError(TicketPreconditionError):
    """No board column matches the given id or name."""


class SchemaNotSupportedError(TicketPreconditionError):
    """Operation needs the repository-scoped schema, but the store is legacy."""


class IdentifierAllocationError(TicketError):
    """Every candidate sequence number collided with an existing ticket."""


class OperationCancelledError(TicketError):
    """The caller cancelled the operation between store round-trips."""
