"""Ticket endpoints: create, read, update, evaluate, move and migrate."""

from fastapi import APIRouter, status

from ticketflow.api.dependencies import LifecycleDep
from ticketflow.api.models import (
    CreateTicketRequest,
    CreateTicketResponse,
    EvaluateRequest,
    MigrateRequest,
    MigrateResponse,
    MoveRequest,
    MoveResponse,
    MoveToTodoRequest,
    ReadinessResponse,
    SweepRequest,
    SweepResponse,
    TicketDetailResponse,
    UpdateBodyRequest,
    UpdateBodyResponse,
    create_to_response,
    migrate_to_response,
    move_to_response,
    readiness_to_response,
    sweep_to_response,
    ticket_to_response,
    update_to_response,
)

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post(
    "",
    response_model=CreateTicketResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_ticket(request: CreateTicketRequest, lifecycle: LifecycleDep) -> CreateTicketResponse:
    """Create a ticket; it lands in To Do when it passes the Definition of Ready."""
    result = lifecycle.create(request.title, request.body_md, repository=request.repository)
    return create_to_response(result)


@router.post("/evaluate", response_model=ReadinessResponse)
def evaluate_ticket(request: EvaluateRequest, lifecycle: LifecycleDep) -> ReadinessResponse:
    """Evaluate a body against the Definition of Ready without storing it."""
    return readiness_to_response(lifecycle.evaluate(request.body_md))


@router.post("/sweep-unassigned", response_model=SweepResponse)
def sweep_unassigned(request: SweepRequest, lifecycle: LifecycleDep) -> SweepResponse:
    """Move every ready Unassigned ticket to To Do."""
    return sweep_to_response(lifecycle.sweep_unassigned(request.repository))


@router.get("/{ref}", response_model=TicketDetailResponse, response_model_exclude_none=True)
def get_ticket(
    ref: str, lifecycle: LifecycleDep, repository: str | None = None
) -> TicketDetailResponse:
    """Get a ticket by number or display id."""
    ticket = lifecycle.get_ticket(ref, repository=repository)
    return TicketDetailResponse(ticket=ticket_to_response(ticket))


@router.put("/{ref}/body", response_model=UpdateBodyResponse)
def update_body(
    ref: str, request: UpdateBodyRequest, lifecycle: LifecycleDep
) -> UpdateBodyResponse:
    """Replace a ticket's body."""
    result = lifecycle.update(ref, request.body_md, repository=request.repository)
    return update_to_response(result)


@router.post("/{ref}/move", response_model=MoveResponse)
def move_ticket(ref: str, request: MoveRequest, lifecycle: LifecycleDep) -> MoveResponse:
    """Move a ticket to a column at the requested position."""
    result = lifecycle.move(
        ref, request.column, position=request.position, repository=request.repository
    )
    return move_to_response(result)


@router.post("/{ref}/move-to-todo", response_model=MoveResponse)
def move_to_todo(ref: str, request: MoveToTodoRequest, lifecycle: LifecycleDep) -> MoveResponse:
    """Move an Unassigned ticket to To Do."""
    result = lifecycle.move_unassigned_to_todo(
        ref, position=request.position, repository=request.repository
    )
    return move_to_response(result)


@router.post("/{ref}/migrate", response_model=MigrateResponse)
def migrate_ticket(
    ref: str, request: MigrateRequest, lifecycle: LifecycleDep
) -> MigrateResponse:
    """Move a ticket to another repository."""
    result = lifecycle.migrate(ref, request.target_repository, repository=request.repository)
    return migrate_to_response(result)
