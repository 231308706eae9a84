"""REST API for ticketflow."""

from ticketflow.api.app import app, create_app, register_exception_handlers
from ticketflow.api.models import (
    CreateTicketRequest,
    CreateTicketResponse,
    ErrorResponse,
)

__all__ = [
    "CreateTicketRequest",
    "CreateTicketResponse",
    "ErrorResponse",
    "app",
    "create_app",
    "register_exception_handlers",
]
