"""Custom exceptions for the Ticket Store."""

from __future__ import annotations

from sqlalchemy.exc import DBAPIError

# PostgreSQL SQLSTATE codes
PG_UNDEFINED_COLUMN = "42703"
PG_UNIQUE_VIOLATION = "23505"


class StoreError(Exception):
    """Base exception for Ticket Store errors.

    Raised directly for any failure that is not one of the recognized
    signatures below; callers treat it as fatal.
    """


class TicketNotFoundError(StoreError):
    """No ticket matches the given key."""


class UniqueViolationError(StoreError):
    """A write collided with an existing unique key."""


class UnknownColumnError(StoreError):
    """The live schema predates a migration and lacks a referenced column."""


def _pgcode(exc: DBAPIError) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


def is_unknown_column_error(exc: BaseException) -> bool:
    """Check for the "unknown column" signature of a not-yet-migrated schema."""
    if isinstance(exc, DBAPIError) and _pgcode(exc) == PG_UNDEFINED_COLUMN:
        return True
    msg = _message(exc).lower()
    if "no such column" in msg or "has no column named" in msg:
        return True
    return "column" in msg and "does not exist" in msg


def is_unique_violation(exc: BaseException) -> bool:
    """Check for a uniqueness-constraint violation."""
    if isinstance(exc, DBAPIError) and _pgcode(exc) == PG_UNIQUE_VIOLATION:
        return True
    msg = _message(exc).lower()
    return "unique constraint" in msg or "duplicate key" in msg


def translate_error(exc: DBAPIError, action: str) -> StoreError:
    """Map a driver error onto the store's exception taxonomy."""
    message = f"{action}: {_message(exc)}"
    if is_unknown_column_error(exc):
        return UnknownColumnError(message)
    if is_unique_violation(exc):
        return UniqueViolationError(message)
    return StoreError(message)
