"""Pydantic models for the REST API.

Every payload uses camelCase keys. Successful responses carry
``success: true``; failures are :class:`ErrorResponse`.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ticketflow.store import Ticket
from ticketflow.tickets import (
    CreateResult,
    MigrateResult,
    MoveResult,
    ReadinessResult,
    SweepResult,
    UpdateResult,
)


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(CamelModel):
    """Failure payload."""

    success: bool = False
    error: str
    detected_placeholders: list[str] | None = None


# Request models


class CreateTicketRequest(CamelModel):
    """Request model for creating a ticket."""

    title: str = Field(..., min_length=1, max_length=500)
    body_md: str
    repository: str | None = None


class UpdateBodyRequest(CamelModel):
    """Request model for replacing a ticket body."""

    body_md: str
    repository: str | None = None


class EvaluateRequest(CamelModel):
    body_md: str


class MoveRequest(CamelModel):
    """Request model for moving a ticket to a column."""

    column: str = Field(..., min_length=1)
    position: int | str | None = None
    repository: str | None = None


class MoveToTodoRequest(CamelModel):
    position: int | str | None = None
    repository: str | None = None


class MigrateRequest(CamelModel):
    """Request model for moving a ticket to another repository."""

    target_repository: str = Field(..., min_length=3)
    repository: str | None = None


class SweepRequest(CamelModel):
    repository: str | None = None


# Response models


class ChecklistResponse(CamelModel):
    goal: bool
    deliverable: bool
    acceptance_criteria: bool
    constraints_non_goals: bool
    no_placeholders: bool


class ReadinessResponse(CamelModel):
    """Response model for a Definition-of-Ready evaluation."""

    success: bool = True
    ready: bool
    missing_items: list[str]
    checklist_results: ChecklistResponse


class CreateTicketResponse(CamelModel):
    """Response model for a created ticket."""

    success: bool = True
    display_id: str
    sequence_number: int
    repository: str | None
    pk: str
    filename: str
    ready: bool
    missing_items: list[str]
    auto_fixed: bool
    moved_to_todo: bool
    move_error: str | None = None
    attempts: int


class UpdateBodyResponse(CamelModel):
    success: bool = True
    display_id: str
    ready: bool
    missing_items: list[str]


class MoveResponse(CamelModel):
    """Response model for a column move."""

    success: bool = True
    display_id: str
    from_column_id: str | None = None
    column_id: str
    column_title: str
    position: int
    moved_at: datetime


class MigrateResponse(CamelModel):
    """Response model for a cross-repository migration."""

    success: bool = True
    previous_display_id: str
    display_id: str
    sequence_number: int
    repository: str
    column_id: str
    position: int


class TicketResponse(CamelModel):
    """Response model for a ticket."""

    pk: str
    display_id: str
    sequence_number: int
    repository: str | None = None
    filename: str
    title: str
    body_md: str
    column_id: str | None = None
    position: int
    moved_at: datetime | None = None
    created_at: datetime | None = None


class TicketDetailResponse(CamelModel):
    success: bool = True
    ticket: TicketResponse


class TicketListResponse(CamelModel):
    success: bool = True
    column_id: str
    tickets: list[TicketResponse]


class NotReadyResponse(CamelModel):
    display_id: str
    title: str
    missing_items: list[str]


class SweepResponse(CamelModel):
    """Response model for an Unassigned sweep."""

    success: bool = True
    moved: list[str]
    not_ready: list[NotReadyResponse]
    failed: dict[str, str]


class RepositoryListResponse(CamelModel):
    success: bool = True
    repositories: list[str]


# Conversions


def readiness_to_response(result: ReadinessResult) -> ReadinessResponse:
    checklist = result.checklist_results
    return ReadinessResponse(
        ready=result.ready,
        missing_items=result.missing_items,
        checklist_results=ChecklistResponse(
            goal=checklist.goal,
            deliverable=checklist.deliverable,
            acceptance_criteria=checklist.acceptance_criteria,
            constraints_non_goals=checklist.constraints_non_goals,
            no_placeholders=checklist.no_placeholders,
        ),
    )


def create_to_response(result: CreateResult) -> CreateTicketResponse:
    return CreateTicketResponse(
        display_id=result.display_id,
        sequence_number=result.sequence_number,
        repository=result.repository,
        pk=result.pk,
        filename=result.filename,
        ready=result.ready,
        missing_items=result.missing_items,
        auto_fixed=result.auto_fixed,
        moved_to_todo=result.moved_to_todo,
        move_error=result.move_error,
        attempts=result.attempts,
    )


def update_to_response(result: UpdateResult) -> UpdateBodyResponse:
    return UpdateBodyResponse(
        display_id=result.display_id,
        ready=result.ready,
        missing_items=result.missing_items,
    )


def move_to_response(result: MoveResult) -> MoveResponse:
    return MoveResponse(
        display_id=result.display_id,
        from_column_id=result.from_column_id,
        column_id=result.column_id,
        column_title=result.column_title,
        position=result.position,
        moved_at=result.moved_at,
    )


def migrate_to_response(result: MigrateResult) -> MigrateResponse:
    return MigrateResponse(
        previous_display_id=result.previous_display_id,
        display_id=result.display_id,
        sequence_number=result.sequence_number,
        repository=result.repository,
        column_id=result.column_id,
        position=result.position,
    )


def ticket_to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        pk=ticket.pk,
        display_id=ticket.display_id,
        sequence_number=ticket.sequence_number,
        repository=ticket.repository,
        filename=ticket.filename,
        title=ticket.title,
        body_md=ticket.body_md,
        column_id=ticket.column_id,
        position=ticket.position,
        moved_at=ticket.moved_at,
        created_at=ticket.created_at,
    )


def sweep_to_response(result: SweepResult) -> SweepResponse:
    return SweepResponse(
        moved=result.moved,
        not_ready=[
            NotReadyResponse(display_id=t.display_id, title=t.title, missing_items=t.missing_items)
            for t in result.not_ready
        ],
        failed=result.failed,
    )
