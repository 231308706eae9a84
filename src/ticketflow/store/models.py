"""SQLAlchemy models and decoded records for the Ticket Store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class ColumnId(StrEnum):
    """Built-in Kanban column ids."""

    UNASSIGNED = "unassigned"
    TODO = "todo"
    QA = "qa"
    HUMAN_IN_THE_LOOP = "human-in-the-loop"
    WILL_NOT_IMPLEMENT = "will-not-implement"


# Seeded into kanban_columns when tables are created: (id, title)
DEFAULT_COLUMNS: list[tuple[str, str]] = [
    (ColumnId.UNASSIGNED.value, "Unassigned"),
    (ColumnId.TODO.value, "To Do"),
    (ColumnId.QA.value, "QA"),
    (ColumnId.HUMAN_IN_THE_LOOP.value, "Human in the Loop"),
    (ColumnId.WILL_NOT_IMPLEMENT.value, "Will Not Implement"),
]


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TicketRecord(Base):
    """Ticket row in the repository-scoped schema generation."""

    __tablename__ = "tickets"
    __table_args__ = (
        UniqueConstraint("repo_full_name", "ticket_number", name="uq_tickets_repo_number"),
    )

    pk: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    repo_full_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    ticket_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    display_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    id: Mapped[str] = mapped_column(String(16), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body_md: Mapped[str] = mapped_column(Text, nullable=False, default="")
    kanban_column_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    kanban_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    kanban_moved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<TicketRecord(pk={self.pk!r}, display_id={self.display_id!r})>"


class KanbanColumnRecord(Base):
    """Board column row."""

    __tablename__ = "kanban_columns"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<KanbanColumnRecord(id={self.id!r}, title={self.title!r})>"


# The pre-migration layout: one global zero-padded id, no repository scoping.
legacy_metadata = MetaData()

legacy_tickets_table = Table(
    "tickets",
    legacy_metadata,
    Column("pk", String(36), primary_key=True),
    Column("id", String(16), nullable=False, unique=True),
    Column("filename", String(255), nullable=False),
    Column("title", String(500), nullable=False),
    Column("body_md", Text, nullable=False),
    Column("kanban_column_id", String(64), nullable=True),
    Column("kanban_position", Integer, nullable=False, default=0),
    Column("kanban_moved_at", DateTime, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

legacy_columns_table = Table(
    "kanban_columns",
    legacy_metadata,
    Column("id", String(64), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("position", Integer, nullable=False, default=0),
)

# Columns present in both generations
LEGACY_TICKET_COLUMNS = (
    TicketRecord.pk,
    TicketRecord.id,
    TicketRecord.filename,
    TicketRecord.title,
    TicketRecord.body_md,
    TicketRecord.kanban_column_id,
    TicketRecord.kanban_position,
    TicketRecord.kanban_moved_at,
    TicketRecord.created_at,
)

TICKET_COLUMNS = (
    *LEGACY_TICKET_COLUMNS,
    TicketRecord.repo_full_name,
    TicketRecord.ticket_number,
    TicketRecord.display_id,
)


@dataclass(frozen=True)
class Ticket:
    """A ticket as decoded from either schema generation.

    Legacy rows carry no repository; their sequence number is the numeric
    value of the legacy id and their display id is the legacy id itself.
    """

    pk: str
    repository: str | None
    sequence_number: int
    display_id: str
    legacy_id: str
    filename: str
    title: str
    body_md: str
    column_id: str | None
    position: int
    moved_at: datetime | None
    created_at: datetime | None

    @property
    def is_legacy(self) -> bool:
        return self.repository is None

    @classmethod
    def from_row(cls, row: Any) -> Ticket:
        """Decode a result row selected with TICKET_COLUMNS or LEGACY_TICKET_COLUMNS."""
        mapping = row._mapping
        legacy_id = str(mapping["id"])
        number = mapping.get("ticket_number")
        if number is None:
            number = int(legacy_id) if legacy_id.isdigit() else 0
        return cls(
            pk=mapping["pk"],
            repository=mapping.get("repo_full_name"),
            sequence_number=int(number),
            display_id=mapping.get("display_id") or legacy_id,
            legacy_id=legacy_id,
            filename=mapping["filename"],
            title=mapping["title"],
            body_md=mapping["body_md"] or "",
            column_id=mapping["kanban_column_id"],
            position=mapping["kanban_position"] or 0,
            moved_at=mapping["kanban_moved_at"],
            created_at=mapping["created_at"],
        )


@dataclass(frozen=True)
class KanbanColumn:
    """A board column."""

    id: str
    title: str
    position: int


@dataclass(frozen=True)
class NewTicket:
    """Field values for inserting a ticket."""

    repository: str
    sequence_number: int
    display_id: str
    legacy_id: str
    filename: str
    title: str
    body_md: str
    column_id: str
    position: int
    moved_at: datetime


@dataclass(frozen=True)
class Relocation:
    """Field values written by a cross-repository migration."""

    repository: str
    sequence_number: int
    display_id: str
    legacy_id: str
    filename: str
    body_md: str
    column_id: str
    position: int
    moved_at: datetime
