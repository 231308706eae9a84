"""TicketStore - Main API for Ticket Store operations."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.exc import DBAPIError

from ticketflow.store.database import DEFAULT_TIMEOUT, Database
from ticketflow.store.exceptions import TicketNotFoundError, translate_error
from ticketflow.store.models import (
    LEGACY_TICKET_COLUMNS,
    TICKET_COLUMNS,
    ColumnId,
    KanbanColumn,
    KanbanColumnRecord,
    NewTicket,
    Relocation,
    Ticket,
    TicketRecord,
    generate_uuid,
    legacy_tickets_table,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from datetime import datetime

    from sqlalchemy.orm import Session
    from sqlalchemy.sql.elements import ColumnElement

logger = logging.getLogger("ticketflow.store")


def _in_column(column_id: str) -> ColumnElement[bool]:
    """Column membership; legacy rows with no column count as unassigned."""
    if column_id == ColumnId.UNASSIGNED:
        return or_(
            TicketRecord.kanban_column_id == column_id,
            TicketRecord.kanban_column_id.is_(None),
            TicketRecord.kanban_column_id == "",
        )
    return TicketRecord.kanban_column_id == column_id


class TicketStore:
    """Main API for Ticket Store operations.

    Methods that reference ``repo_full_name``, ``ticket_number`` or
    ``display_id`` raise :class:`UnknownColumnError` against a store still on
    the legacy schema; methods documented as schema-agnostic only touch
    columns both generations share.
    """

    def __init__(
        self,
        db_path: str = "ticketflow.db",
        timeout: float = DEFAULT_TIMEOUT,
        legacy_schema: bool = False,
    ) -> None:
        """Initialize the store, creating tables if they don't exist.

        Args:
            db_path: SQLite file path, ":memory:", or a SQLAlchemy URL
            timeout: Upper bound in seconds for each store call
            legacy_schema: Create the pre-migration table layout (for stores
                that have not been migrated yet, and for tests)
        """
        self._db = Database(db_path, timeout=timeout)
        self._db.create_tables(legacy=legacy_schema)

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        session = self._db.get_session()
        try:
            yield session
        except DBAPIError as e:
            session.rollback()
            raise translate_error(e, action) from e
        finally:
            session.close()

    # --- Lookups ---

    def get_by_pk(self, pk: str) -> Ticket:
        """Get a ticket by primary key.

        Raises:
            TicketNotFoundError: If no ticket has this pk
            UnknownColumnError: On the legacy schema
        """
        with self._session("fetch ticket by pk") as session:
            row = session.execute(select(*TICKET_COLUMNS).where(TicketRecord.pk == pk)).first()
        if row is None:
            raise TicketNotFoundError(f"Ticket with pk '{pk}' not found")
        return Ticket.from_row(row)

    def get_by_number(self, repository: str, number: int) -> Ticket:
        """Get a ticket by repository and sequence number.

        Raises:
            TicketNotFoundError: If the repository has no such ticket
            UnknownColumnError: On the legacy schema
        """
        stmt = select(*TICKET_COLUMNS).where(
            TicketRecord.repo_full_name == repository,
            TicketRecord.ticket_number == number,
        )
        with self._session("fetch ticket") as session:
            row = session.execute(stmt).first()
        if row is None:
            raise TicketNotFoundError(f"Ticket {number:04d} not found in {repository}")
        return Ticket.from_row(row)

    def get_by_legacy_id(self, legacy_id: str) -> Ticket:
        """Get a ticket by its global zero-padded id. Schema-agnostic.

        Raises:
            TicketNotFoundError: If no ticket has this id
        """
        stmt = select(*LEGACY_TICKET_COLUMNS).where(TicketRecord.id == legacy_id)
        with self._session("fetch ticket by id") as session:
            row = session.execute(stmt).first()
        if row is None:
            raise TicketNotFoundError(f"Ticket {legacy_id} not found")
        return Ticket.from_row(row)

    def max_ticket_number(self, repository: str) -> int | None:
        """Highest sequence number in a repository, or None when it has none."""
        stmt = select(func.max(TicketRecord.ticket_number)).where(
            TicketRecord.repo_full_name == repository
        )
        with self._session("fetch max ticket_number") as session:
            return session.execute(stmt).scalar()

    def max_legacy_number(self) -> int | None:
        """Highest numeric legacy id across all tickets. Schema-agnostic."""
        with self._session("fetch ids") as session:
            ids = session.execute(select(TicketRecord.id)).scalars().all()
        numbers = [int(value) for value in ids if value and value.isdigit()]
        return max(numbers) if numbers else None

    def list_column(self, column_id: str, repository: str) -> list[Ticket]:
        """Tickets of a repository's column, in rendering order."""
        stmt = (
            select(*TICKET_COLUMNS)
            .where(TicketRecord.repo_full_name == repository, _in_column(column_id))
            .order_by(TicketRecord.kanban_position, TicketRecord.ticket_number)
        )
        with self._session("list tickets by column") as session:
            rows = session.execute(stmt).all()
        return [Ticket.from_row(row) for row in rows]

    def list_column_legacy(self, column_id: str) -> list[Ticket]:
        """Tickets of a column across the whole store. Schema-agnostic."""
        stmt = (
            select(*LEGACY_TICKET_COLUMNS)
            .where(_in_column(column_id))
            .order_by(TicketRecord.kanban_position, TicketRecord.id)
        )
        with self._session("list tickets by column") as session:
            rows = session.execute(stmt).all()
        return [Ticket.from_row(row) for row in rows]

    def list_repositories(self) -> list[str]:
        """Repositories that own at least one ticket, sorted by name."""
        stmt = (
            select(TicketRecord.repo_full_name)
            .where(TicketRecord.repo_full_name.is_not(None))
            .distinct()
            .order_by(TicketRecord.repo_full_name)
        )
        with self._session("list repositories") as session:
            return list(session.execute(stmt).scalars().all())

    def repository_exists(self, repository: str) -> bool:
        """Whether any ticket belongs to the repository."""
        stmt = select(TicketRecord.pk).where(TicketRecord.repo_full_name == repository).limit(1)
        with self._session("probe repository") as session:
            return session.execute(stmt).first() is not None

    def list_columns(self) -> list[KanbanColumn]:
        """Board columns, in board order."""
        stmt = select(KanbanColumnRecord).order_by(KanbanColumnRecord.position)
        with self._session("list columns") as session:
            records = session.execute(stmt).scalars().all()
        return [KanbanColumn(id=r.id, title=r.title, position=r.position) for r in records]

    # --- Column aggregates ---

    def max_position(self, column_id: str, repository: str | None = None) -> int | None:
        """Highest position in a column, or None when it is empty.

        Scoped to ``repository`` when given; store-wide (schema-agnostic)
        otherwise.
        """
        stmt = select(func.max(TicketRecord.kanban_position)).where(_in_column(column_id))
        if repository is not None:
            stmt = stmt.where(TicketRecord.repo_full_name == repository)
        with self._session("fetch max position") as session:
            return session.execute(stmt).scalar()

    def column_members(
        self, column_id: str, repository: str | None = None
    ) -> list[tuple[str, int]]:
        """``(pk, position)`` of every ticket in a column, in rendering order.

        Ties are broken the way :meth:`list_column` (by sequence number) or
        :meth:`list_column_legacy` (by legacy id) break them.
        """
        stmt = select(TicketRecord.pk, TicketRecord.kanban_position).where(_in_column(column_id))
        if repository is not None:
            stmt = stmt.where(TicketRecord.repo_full_name == repository).order_by(
                TicketRecord.kanban_position, TicketRecord.ticket_number
            )
        else:
            stmt = stmt.order_by(TicketRecord.kanban_position, TicketRecord.id)
        with self._session("fetch column positions") as session:
            rows = session.execute(stmt).all()
        return [(row.pk, row.kanban_position or 0) for row in rows]

    # --- Writes ---

    def insert_ticket(self, new: NewTicket) -> Ticket:
        """Insert a ticket in the repository-scoped schema.

        Raises:
            UniqueViolationError: If (repository, sequence_number) is taken
            UnknownColumnError: On the legacy schema
        """
        record = TicketRecord(
            pk=generate_uuid(),
            repo_full_name=new.repository,
            ticket_number=new.sequence_number,
            display_id=new.display_id,
            id=new.legacy_id,
            filename=new.filename,
            title=new.title,
            body_md=new.body_md,
            kanban_column_id=new.column_id,
            kanban_position=new.position,
            kanban_moved_at=new.moved_at,
        )
        with self._session("insert ticket") as session:
            session.add(record)
            session.commit()
        logger.debug("Inserted ticket %s (pk=%s)", new.display_id, record.pk)
        return Ticket(
            pk=record.pk,
            repository=new.repository,
            sequence_number=new.sequence_number,
            display_id=new.display_id,
            legacy_id=new.legacy_id,
            filename=new.filename,
            title=new.title,
            body_md=new.body_md,
            column_id=new.column_id,
            position=new.position,
            moved_at=new.moved_at,
            created_at=new.moved_at,
        )

    def insert_legacy_ticket(self, new: NewTicket) -> Ticket:
        """Insert a ticket in the legacy schema, keyed by its global id.

        Repository, sequence number and display id of ``new`` are not stored.

        Raises:
            UniqueViolationError: If the legacy id is taken
        """
        pk = generate_uuid()
        stmt = insert(legacy_tickets_table).values(
            pk=pk,
            id=new.legacy_id,
            filename=new.filename,
            title=new.title,
            body_md=new.body_md,
            kanban_column_id=new.column_id,
            kanban_position=new.position,
            kanban_moved_at=new.moved_at,
        )
        with self._session("insert ticket") as session:
            session.execute(stmt)
            session.commit()
        logger.debug("Inserted legacy ticket %s (pk=%s)", new.legacy_id, pk)
        return Ticket(
            pk=pk,
            repository=None,
            sequence_number=new.sequence_number,
            display_id=new.legacy_id,
            legacy_id=new.legacy_id,
            filename=new.filename,
            title=new.title,
            body_md=new.body_md,
            column_id=new.column_id,
            position=new.position,
            moved_at=new.moved_at,
            created_at=new.moved_at,
        )

    def update_body(self, pk: str, body_md: str) -> None:
        """Replace a ticket's body. Schema-agnostic.

        Raises:
            TicketNotFoundError: If no ticket has this pk
        """
        stmt = (
            update(TicketRecord)
            .where(TicketRecord.pk == pk)
            .values(body_md=body_md)
            .execution_options(synchronize_session=False)
        )
        with self._session("update ticket body") as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise TicketNotFoundError(f"Ticket with pk '{pk}' not found")
            session.commit()

    def move_ticket(
        self,
        pk: str,
        column_id: str,
        position: int,
        moved_at: datetime,
        shifted: Sequence[tuple[str, int]] = (),
    ) -> None:
        """Place a ticket in a column, repositioning siblings first.

        Each ``(pk, position)`` in ``shifted`` is written in the same
        transaction as the ticket's own write. Schema-agnostic.

        Raises:
            TicketNotFoundError: If no ticket has this pk
        """
        with self._session("move ticket") as session:
            for sibling_pk, sibling_position in shifted:
                session.execute(
                    update(TicketRecord)
                    .where(TicketRecord.pk == sibling_pk)
                    .values(kanban_position=sibling_position)
                    .execution_options(synchronize_session=False)
                )

            result = session.execute(
                update(TicketRecord)
                .where(TicketRecord.pk == pk)
                .values(
                    kanban_column_id=column_id,
                    kanban_position=position,
                    kanban_moved_at=moved_at,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise TicketNotFoundError(f"Ticket with pk '{pk}' not found")
            session.commit()

    def relocate_ticket(self, pk: str, relocation: Relocation) -> None:
        """Move a ticket to another repository in a single write.

        Raises:
            UniqueViolationError: If the target (repository, number) is taken
            TicketNotFoundError: If no ticket has this pk
            UnknownColumnError: On the legacy schema
        """
        stmt = (
            update(TicketRecord)
            .where(TicketRecord.pk == pk)
            .values(
                repo_full_name=relocation.repository,
                ticket_number=relocation.sequence_number,
                display_id=relocation.display_id,
                id=relocation.legacy_id,
                filename=relocation.filename,
                body_md=relocation.body_md,
                kanban_column_id=relocation.column_id,
                kanban_position=relocation.position,
                kanban_moved_at=relocation.moved_at,
            )
            .execution_options(synchronize_session=False)
        )
        with self._session("relocate ticket") as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise TicketNotFoundError(f"Ticket with pk '{pk}' not found")
            session.commit()
