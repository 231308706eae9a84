"""TicketLifecycle - Create, update, move and migrate tickets."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ticketflow.config import REPOSITORY_RE
from ticketflow.logging import truncate_output
from ticketflow.repos.probe import StoreRepositoryProbe
from ticketflow.store.exceptions import StoreError
from ticketflow.store.models import ColumnId, NewTicket, Relocation
from ticketflow.tickets.exceptions import (
    NotInUnassignedError,
    OperationCancelledError,
    RepositoryNotFoundError,
    SchemaNotSupportedError,
    TicketPreconditionError,
    TicketValidationError,
)
from ticketflow.tickets.identifiers import (
    DEFAULT_MAX_ATTEMPTS,
    allocate_with_retry,
    candidate_numbers,
    format_display_id,
    format_legacy_id,
    parse_ticket_ref,
    repository_prefix,
    ticket_filename,
)
from ticketflow.tickets.models import (
    CreateResult,
    MigrateResult,
    MoveResult,
    NotReadyTicket,
    ReadinessResult,
    SweepResult,
    UpdateResult,
)
from ticketflow.tickets.normalization import normalize_body
from ticketflow.tickets.placeholders import ensure_no_placeholders
from ticketflow.tickets.positions import (
    Placement,
    append_position,
    parse_placement,
    plan_placement,
)
from ticketflow.tickets.readiness import apply_checkbox_fix, evaluate_readiness
from ticketflow.tickets.resolution import resolve_column, resolve_ticket, schema_fallback

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Mapping

    from ticketflow.config import Settings
    from ticketflow.repos.probe import RepositoryProbe
    from ticketflow.store.models import KanbanColumn, Ticket
    from ticketflow.store.store import TicketStore

logger = logging.getLogger("ticketflow.lifecycle")

UNASSIGNED_IDS = (ColumnId.UNASSIGNED.value, "", None)


class TicketLifecycle:
    """Applies ticket operations against a TicketStore.

    One instance serves one request. Every operation validates its input
    before the first store call and checks the cancel event before each
    store or probe round-trip.
    """

    def __init__(
        self,
        store: TicketStore,
        probe: RepositoryProbe | None = None,
        default_repository: str | None = None,
        prefixes: Mapping[str, str] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the lifecycle manager.

        Args:
            store: Ticket Store to read and write.
            probe: Repository existence probe used by migrate. Defaults to
                a StoreRepositoryProbe over ``store``.
            default_repository: Repository used when a call names none.
            prefixes: Repository -> display prefix overrides.
            max_attempts: Candidate numbers tried per allocation.
            cancel_event: When set, the next round-trip raises
                OperationCancelledError.
            clock: Returns the current time (for tests).
        """
        self.store = store
        self.probe = probe if probe is not None else StoreRepositoryProbe(store)
        self.default_repository = default_repository
        self.prefixes = dict(prefixes or {})
        self.max_attempts = max_attempts
        self.cancel_event = cancel_event
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(
        cls,
        store: TicketStore,
        settings: Settings,
        probe: RepositoryProbe | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TicketLifecycle:
        return cls(
            store,
            probe=probe,
            default_repository=settings.default_repository,
            prefixes=settings.prefixes,
            max_attempts=settings.max_id_attempts,
            cancel_event=cancel_event,
        )

    # --- Helpers ---

    def _checkpoint(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError("Operation cancelled")

    def _repository(self, repository: str | None) -> str:
        name = (repository or self.default_repository or "").strip()
        if not name:
            raise TicketValidationError(
                "Repository is required: pass one or configure default_repository"
            )
        if not REPOSITORY_RE.match(name):
            raise TicketValidationError(f"Invalid repository '{name}': expected 'owner/name'")
        return name

    def _resolve(self, number: int, repository: str) -> Ticket:
        self._checkpoint()
        return resolve_ticket(self.store, number, repository)

    def _columns(self) -> list[KanbanColumn]:
        self._checkpoint()
        return self.store.list_columns()

    def _start_number(self, repository: str) -> int:
        self._checkpoint()
        highest = schema_fallback(
            lambda: self.store.max_ticket_number(repository),
            self.store.max_legacy_number,
        )
        return (highest or 0) + 1

    def _append(self, ticket: Ticket, column_id: str) -> int:
        """Put a ticket at the end of a column; returns its new position."""
        self._checkpoint()
        position = append_position(self.store.max_position(column_id, ticket.repository))
        self._checkpoint()
        self.store.move_ticket(ticket.pk, column_id, position, self._clock())
        return position

    def _place(self, ticket: Ticket, column: KanbanColumn, placement: Placement) -> MoveResult:
        self._checkpoint()
        members = self.store.column_members(column.id, ticket.repository)
        position, shifted = plan_placement(members, placement, ticket.pk)

        moved_at = self._clock()
        self._checkpoint()
        self.store.move_ticket(ticket.pk, column.id, position, moved_at, shifted=shifted)
        logger.info(
            "Moved %s from %s to %s at position %d",
            ticket.display_id,
            ticket.column_id or ColumnId.UNASSIGNED.value,
            column.id,
            position,
        )
        return MoveResult(
            display_id=ticket.display_id,
            from_column_id=ticket.column_id,
            column_id=column.id,
            column_title=column.title,
            position=position,
            moved_at=moved_at,
        )

    # --- Operations ---

    def create(self, title: str, body_md: str, repository: str | None = None) -> CreateResult:
        """Create a ticket in Unassigned and promote it to To Do if it is ready.

        Args:
            title: Ticket title (used for the filename slug).
            body_md: Markdown body.
            repository: Owning repository; defaults to default_repository.

        Returns:
            CreateResult. A failure to move the ticket to To Do is reported in
            ``move_error`` and does not fail the creation.

        Raises:
            TicketValidationError: For a missing title or repository, or
                placeholders in the body.
            IdentifierAllocationError: If every candidate number was taken.
            StoreError: If the store fails.
        """
        title = (title or "").strip()
        if not title:
            raise TicketValidationError("Title is required")
        repo = self._repository(repository)
        ensure_no_placeholders(body_md)

        body = normalize_body(body_md)
        body, _, auto_fixed = apply_checkbox_fix(body)
        prefix = repository_prefix(repo, self.prefixes)
        moved_at = self._clock()

        def new_ticket(number: int, display_id: str) -> NewTicket:
            final_body = normalize_body(body, display_id)
            ensure_no_placeholders(final_body)
            return NewTicket(
                repository=repo,
                sequence_number=number,
                display_id=display_id,
                legacy_id=format_legacy_id(number),
                filename=ticket_filename(number, title),
                title=title,
                body_md=final_body,
                column_id=ColumnId.UNASSIGNED.value,
                position=0,
                moved_at=moved_at,
            )

        def insert(number: int) -> Ticket:
            self._checkpoint()
            return schema_fallback(
                lambda: self.store.insert_ticket(
                    new_ticket(number, format_display_id(prefix, number))
                ),
                lambda: self.store.insert_legacy_ticket(
                    new_ticket(number, format_legacy_id(number))
                ),
            )

        start = self._start_number(repo)
        allocation = allocate_with_retry(candidate_numbers(start), self.max_attempts, insert)
        ticket = allocation.value
        logger.info(
            "Created %s in %s after %d attempt(s)", ticket.display_id, repo, allocation.attempts
        )
        logger.debug("Stored body for %s:\n%s", ticket.display_id, truncate_output(ticket.body_md))

        readiness = evaluate_readiness(ticket.body_md)
        result = CreateResult(
            display_id=ticket.display_id,
            sequence_number=ticket.sequence_number,
            repository=ticket.repository,
            pk=ticket.pk,
            filename=ticket.filename,
            ready=readiness.ready,
            missing_items=readiness.missing_items,
            auto_fixed=auto_fixed,
            attempts=allocation.attempts,
        )
        if readiness.ready:
            try:
                self._append(ticket, ColumnId.TODO.value)
                result.moved_to_todo = True
            except StoreError as e:
                logger.warning("Created %s but could not move it to To Do: %s", ticket.display_id, e)
                result.move_error = str(e)
        return result

    def update(
        self, ticket_ref: int | str, body_md: str, repository: str | None = None
    ) -> UpdateResult:
        """Replace a ticket's body. The column is left unchanged.

        Raises:
            TicketValidationError: For a bad ref or placeholders in the body.
            TicketNotFoundError: If the ticket does not exist.
        """
        number = parse_ticket_ref(ticket_ref)
        ensure_no_placeholders(body_md)
        repo = self._repository(repository)

        ticket = self._resolve(number, repo)
        body = normalize_body(body_md, ticket.display_id)
        ensure_no_placeholders(body)

        self._checkpoint()
        self.store.update_body(ticket.pk, body)
        logger.info("Updated body of %s", ticket.display_id)

        readiness = evaluate_readiness(body)
        return UpdateResult(
            display_id=ticket.display_id,
            ready=readiness.ready,
            missing_items=readiness.missing_items,
        )

    def evaluate(self, body_md: str) -> ReadinessResult:
        """Evaluate a body against the Definition of Ready without storing anything."""
        return evaluate_readiness(normalize_body(body_md))

    def move(
        self,
        ticket_ref: int | str,
        column: str,
        position: int | str | None = None,
        repository: str | None = None,
    ) -> MoveResult:
        """Move a ticket to a column, at the bottom unless a position is given.

        Args:
            ticket_ref: 7, "0007" or "ACME-0007".
            column: Column id, title or alias.
            position: "top", "bottom" or a 0-based index.
            repository: Repository scope; defaults to default_repository.

        Raises:
            TicketValidationError: For a bad ref or position.
            ColumnNotFoundError: If the column is unknown.
            TicketNotFoundError: If the ticket does not exist.
        """
        number = parse_ticket_ref(ticket_ref)
        placement = parse_placement(position)
        repo = self._repository(repository)

        target = resolve_column(self._columns(), column)
        ticket = self._resolve(number, repo)
        return self._place(ticket, target, placement)

    def move_unassigned_to_todo(
        self,
        ticket_ref: int | str,
        position: int | str | None = None,
        repository: str | None = None,
    ) -> MoveResult:
        """Move a ticket from Unassigned to To Do. Readiness is not checked here.

        Raises:
            NotInUnassignedError: If the ticket is in any other column.
        """
        number = parse_ticket_ref(ticket_ref)
        placement = parse_placement(position)
        repo = self._repository(repository)

        ticket = self._resolve(number, repo)
        if ticket.column_id not in UNASSIGNED_IDS:
            raise NotInUnassignedError(
                f"Ticket {ticket.display_id} is in '{ticket.column_id}', not Unassigned"
            )
        todo = resolve_column(self._columns(), ColumnId.TODO.value)
        return self._place(ticket, todo, placement)

    def migrate(
        self,
        ticket_ref: int | str,
        target_repository: str,
        repository: str | None = None,
    ) -> MigrateResult:
        """Move a ticket to another repository, landing at the end of its To Do.

        The ticket gets the next free number in the target repository and a
        Title line carrying the new display id.

        Raises:
            TicketValidationError: For a bad ref or repository name.
            TicketPreconditionError: If the ticket is already in the target.
            SchemaNotSupportedError: If the store is on the legacy schema.
            RepositoryNotFoundError: If the target repository does not exist.
            IdentifierAllocationError: If every candidate number was taken.
        """
        number = parse_ticket_ref(ticket_ref)
        repo = self._repository(repository)
        target = (target_repository or "").strip()
        if not REPOSITORY_RE.match(target):
            raise TicketValidationError(
                f"Invalid target repository '{target_repository}': expected 'owner/name'"
            )

        ticket = self._resolve(number, repo)
        if ticket.is_legacy:
            raise SchemaNotSupportedError(
                "Moving tickets between repositories needs the repository-scoped schema"
            )
        if ticket.repository == target:
            raise TicketPreconditionError(f"Ticket {ticket.display_id} is already in {target}")

        self._checkpoint()
        if not self.probe.exists(target):
            raise RepositoryNotFoundError(f"Repository {target} not found or not accessible")

        prefix = repository_prefix(target, self.prefixes)
        self._checkpoint()
        start = (self.store.max_ticket_number(target) or 0) + 1
        self._checkpoint()
        position = append_position(self.store.max_position(ColumnId.TODO.value, target))
        moved_at = self._clock()

        def relocate(candidate: int) -> str:
            self._checkpoint()
            display_id = format_display_id(prefix, candidate)
            body = normalize_body(ticket.body_md, display_id)
            ensure_no_placeholders(body)
            self.store.relocate_ticket(
                ticket.pk,
                Relocation(
                    repository=target,
                    sequence_number=candidate,
                    display_id=display_id,
                    legacy_id=format_legacy_id(candidate),
                    filename=ticket_filename(candidate, ticket.title),
                    body_md=body,
                    column_id=ColumnId.TODO.value,
                    position=position,
                    moved_at=moved_at,
                ),
            )
            return display_id

        allocation = allocate_with_retry(candidate_numbers(start), self.max_attempts, relocate)
        logger.info(
            "Migrated %s from %s to %s as %s",
            ticket.display_id,
            ticket.repository,
            target,
            allocation.value,
        )
        return MigrateResult(
            previous_display_id=ticket.display_id,
            display_id=allocation.value,
            sequence_number=allocation.number,
            repository=target,
            column_id=ColumnId.TODO.value,
            position=position,
        )

    # --- Reads ---

    def get_ticket(self, ticket_ref: int | str, repository: str | None = None) -> Ticket:
        number = parse_ticket_ref(ticket_ref)
        return self._resolve(number, self._repository(repository))

    def get_column(self, column: str) -> KanbanColumn:
        """Resolve a column id, title or alias to a board column."""
        return resolve_column(self._columns(), column)

    def list_column(self, column: str, repository: str | None = None) -> list[Ticket]:
        """Tickets of a column in rendering order."""
        repo = self._repository(repository)
        target = self.get_column(column)
        self._checkpoint()
        return schema_fallback(
            lambda: self.store.list_column(target.id, repo),
            lambda: self.store.list_column_legacy(target.id),
        )

    def list_repositories(self) -> list[str]:
        self._checkpoint()
        return schema_fallback(self.store.list_repositories, list)

    def sweep_unassigned(self, repository: str | None = None) -> SweepResult:
        """Promote every ready Unassigned ticket to the end of To Do.

        A ticket the store refuses to move is reported in ``failed``; the
        sweep carries on with the rest.
        """
        result = SweepResult()
        for ticket in self.list_column(ColumnId.UNASSIGNED.value, repository):
            readiness = evaluate_readiness(ticket.body_md)
            if not readiness.ready:
                result.not_ready.append(
                    NotReadyTicket(
                        display_id=ticket.display_id,
                        title=ticket.title,
                        missing_items=readiness.missing_items,
                    )
                )
                continue
            try:
                self._append(ticket, ColumnId.TODO.value)
            except StoreError as e:
                logger.warning("Could not move %s to To Do: %s", ticket.display_id, e)
                result.failed[ticket.display_id] = str(e)
                continue
            result.moved.append(ticket.display_id)

        logger.info(
            "Swept Unassigned: %d moved, %d not ready, %d failed",
            len(result.moved),
            len(result.not_ready),
            len(result.failed),
        )
        return result


