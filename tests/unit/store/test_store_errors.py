"""Unit tests for driver error translation."""

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from ticketflow.store import (
    StoreError,
    UniqueViolationError,
    UnknownColumnError,
    is_unique_violation,
    is_unknown_column_error,
)
from ticketflow.store.exceptions import translate_error


class FakePgError(Exception):
    """Stand-in for a psycopg error carrying a SQLSTATE."""

    def __init__(self, message: str, pgcode: str | None = None) -> None:
        super().__init__(message)
        self.pgcode = pgcode


def wrap(orig: Exception, cls: type[DBAPIError] = DBAPIError) -> DBAPIError:
    return cls("SELECT 1", {}, orig)


@pytest.mark.unit
class TestSignatures:
    """Tests for error signature detection."""

    def test_unknown_column_by_pgcode(self) -> None:
        assert is_unknown_column_error(wrap(FakePgError("boom", pgcode="42703")))

    @pytest.mark.parametrize(
        "message",
        [
            'column "repo_full_name" does not exist',
            "no such column: tickets.ticket_number",
            "table tickets has no column named display_id",
        ],
    )
    def test_unknown_column_by_message(self, message: str) -> None:
        assert is_unknown_column_error(wrap(Exception(message), OperationalError))

    def test_unique_violation_by_pgcode(self) -> None:
        assert is_unique_violation(wrap(FakePgError("boom", pgcode="23505")))

    @pytest.mark.parametrize(
        "message",
        [
            'duplicate key value violates unique constraint "uq_tickets_repo_number"',
            "UNIQUE constraint failed: tickets.repo_full_name, tickets.ticket_number",
        ],
    )
    def test_unique_violation_by_message(self, message: str) -> None:
        assert is_unique_violation(wrap(Exception(message), IntegrityError))

    def test_unrelated_error(self) -> None:
        exc = wrap(Exception("database is locked"), OperationalError)
        assert not is_unknown_column_error(exc)
        assert not is_unique_violation(exc)


@pytest.mark.unit
class TestTranslateError:
    """Tests for translate_error."""

    def test_unknown_column(self) -> None:
        error = translate_error(wrap(FakePgError("x", "42703")), "fetch ticket")
        assert isinstance(error, UnknownColumnError)

    def test_unique_violation(self) -> None:
        error = translate_error(wrap(FakePgError("x", "23505")), "insert ticket")
        assert isinstance(error, UniqueViolationError)

    def test_fatal_keeps_message(self) -> None:
        error = translate_error(wrap(Exception("disk I/O error")), "insert ticket")

        assert type(error) is StoreError
        assert str(error) == "insert ticket: disk I/O error"
