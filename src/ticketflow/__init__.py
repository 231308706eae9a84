"""ticketflow - Ticket lifecycle and Kanban ordering engine."""

__version__ = "0.1.0"
