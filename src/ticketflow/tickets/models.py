"""Data models for the Ticket Lifecycle engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003


@dataclass
class ChecklistResults:
    """Outcome of each Definition-of-Ready item."""

    goal: bool
    deliverable: bool
    acceptance_criteria: bool
    constraints_non_goals: bool
    no_placeholders: bool

    def all_passed(self) -> bool:
        return (
            self.goal
            and self.deliverable
            and self.acceptance_criteria
            and self.constraints_non_goals
            and self.no_placeholders
        )


@dataclass
class ReadinessResult:
    """Result of evaluating a ticket body against the Definition of Ready.

    Attributes:
        ready: True when every checklist item passes.
        missing_items: Human-readable description of each failing item.
        checklist_results: Per-item outcome.
    """

    ready: bool
    missing_items: list[str]
    checklist_results: ChecklistResults


@dataclass
class CreateResult:
    """Outcome of creating a ticket.

    Attributes:
        display_id: Human-facing id, e.g. ``ACME-0001``.
        sequence_number: Number within the repository.
        repository: Owning repository (None on a legacy store).
        pk: Primary key of the new row.
        filename: ``NNNN-slug.md`` name of the ticket.
        ready: Readiness of the stored body.
        missing_items: Failing readiness items.
        auto_fixed: Acceptance-criteria bullets were turned into checkboxes.
        moved_to_todo: Ticket was appended to To Do after creation.
        move_error: Why the move to To Do failed, when it did.
        attempts: Candidate numbers tried before the insert succeeded.
    """

    display_id: str
    sequence_number: int
    repository: str | None
    pk: str
    filename: str
    ready: bool
    missing_items: list[str] = field(default_factory=list)
    auto_fixed: bool = False
    moved_to_todo: bool = False
    move_error: str | None = None
    attempts: int = 1


@dataclass
class UpdateResult:
    """Outcome of replacing a ticket body."""

    display_id: str
    ready: bool
    missing_items: list[str] = field(default_factory=list)


@dataclass
class MoveResult:
    """Outcome of moving a ticket between or within columns."""

    display_id: str
    from_column_id: str | None
    column_id: str
    column_title: str
    position: int
    moved_at: datetime


@dataclass
class MigrateResult:
    """Outcome of moving a ticket to another repository."""

    previous_display_id: str
    display_id: str
    sequence_number: int
    repository: str
    column_id: str
    position: int


@dataclass
class NotReadyTicket:
    """An Unassigned ticket that stayed put during a sweep."""

    display_id: str
    title: str
    missing_items: list[str]


@dataclass
class SweepResult:
    """Outcome of sweeping the Unassigned column.

    Attributes:
        moved: Display ids appended to To Do.
        not_ready: Tickets that failed the readiness check.
        failed: Display id to error message for moves the store rejected.
    """

    moved: list[str] = field(default_factory=list)
    not_ready: list[NotReadyTicket] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
