"""Board endpoints: column listings and repositories."""

from fastapi import APIRouter

from ticketflow.api.dependencies import LifecycleDep
from ticketflow.api.models import (
    RepositoryListResponse,
    TicketListResponse,
    ticket_to_response,
)

router = APIRouter(tags=["board"])


@router.get(
    "/columns/{column}/tickets",
    response_model=TicketListResponse,
    response_model_exclude_none=True,
)
def list_column(
    column: str, lifecycle: LifecycleDep, repository: str | None = None
) -> TicketListResponse:
    """List a column's tickets in board order."""
    target = lifecycle.get_column(column)
    tickets = lifecycle.list_column(target.id, repository=repository)
    return TicketListResponse(
        column_id=target.id,
        tickets=[ticket_to_response(t) for t in tickets],
    )


@router.get("/repositories", response_model=RepositoryListResponse)
def list_repositories(lifecycle: LifecycleDep) -> RepositoryListResponse:
    """List repositories that own tickets."""
    return RepositoryListResponse(repositories=lifecycle.list_repositories())
