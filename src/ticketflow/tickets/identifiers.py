"""Ticket identifiers: display ids, filenames, ref parsing and number allocation."""

from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from ticketflow.store.exceptions import UniqueViolationError
from ticketflow.tickets.exceptions import IdentifierAllocationError, InvalidTicketRefError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

logger = logging.getLogger("ticketflow.identifiers")

DEFAULT_MAX_ATTEMPTS = 10
FALLBACK_PREFIX = "PRJ"

T = TypeVar("T")

# 7, "0007", "ACME-0007"
TICKET_REF_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9]*-)?(\d+)$")


def repository_prefix(repository: str, overrides: Mapping[str, str] | None = None) -> str:
    """Derive the display-id prefix of a repository.

    The prefix comes from the owner segment of ``owner/name``: the last
    alphabetic token of 2-6 characters, else its first four letters, else
    ``PRJ``. A configured override always wins.

    Args:
        repository: Repository full name, e.g. "acme/web".
        overrides: Repository full name -> prefix mapping from configuration.

    Returns:
        Upper-case prefix, e.g. "ACME".
    """
    if overrides and repository in overrides:
        return overrides[repository].upper()

    owner = repository.split("/", 1)[0]
    tokens = [t for t in re.split(r"[^a-z0-9]+", owner.lower()) if t]
    for token in reversed(tokens):
        if re.search(r"[a-z]", token) and 2 <= len(token) <= 6:
            return token.upper()

    letters = re.sub(r"[^A-Za-z]", "", owner).upper()
    return letters[:4] or FALLBACK_PREFIX


def format_display_id(prefix: str, number: int) -> str:
    return f"{prefix}-{number:04d}"


def format_legacy_id(number: int) -> str:
    return f"{number:04d}"


def slug_from_title(title: str) -> str:
    """Lowercase, hyphen-separated slug of a title; 'ticket' when nothing is left."""
    slug = re.sub(r"\s+", "-", title.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "ticket"


def ticket_filename(number: int, title: str) -> str:
    return f"{format_legacy_id(number)}-{slug_from_title(title)}.md"


def parse_ticket_ref(ref: int | str) -> int:
    """Parse a ticket reference into a sequence number.

    Accepts a bare number (``7``), a zero-padded number (``"0007"``) or a
    prefixed display id (``"ACME-0007"``). The prefix is not checked against
    the repository; only the number is used.

    Raises:
        InvalidTicketRefError: If the reference has any other shape or is < 1.
    """
    if isinstance(ref, bool):
        raise InvalidTicketRefError(f"Invalid ticket reference: {ref!r}")
    if isinstance(ref, int):
        number = ref
    else:
        match = TICKET_REF_RE.match(str(ref).strip())
        if match is None:
            raise InvalidTicketRefError(
                f"Invalid ticket reference '{ref}': expected a number or an id like ACME-0007"
            )
        number = int(match.group(1))
    if number < 1:
        raise InvalidTicketRefError(f"Invalid ticket reference: {ref!r}")
    return number


def candidate_numbers(start: int) -> Iterator[int]:
    """``start, start + 1, ...``"""
    return itertools.count(start)


@dataclass
class Allocation(Generic[T]):
    """A successful allocation: the insert's return value and the number it used."""

    value: T
    number: int
    attempts: int


def allocate_with_retry(
    candidates: Iterable[int],
    attempt_budget: int,
    insert_fn: Callable[[int], T],
) -> Allocation[T]:
    """Try ``insert_fn`` with successive candidate numbers until one sticks.

    A UniqueViolationError moves on to the next candidate; any other
    exception propagates immediately.

    Args:
        candidates: Numbers to try, in order.
        attempt_budget: Maximum number of candidates to try.
        insert_fn: Performs the write for one candidate number.

    Returns:
        Allocation with the insert's result.

    Raises:
        IdentifierAllocationError: If every tried candidate collided.
    """
    attempts = 0
    last_error: UniqueViolationError | None = None
    for number in itertools.islice(candidates, attempt_budget):
        attempts += 1
        try:
            value = insert_fn(number)
        except UniqueViolationError as e:
            logger.info("Number %d already taken, trying next (attempt %d)", number, attempts)
            last_error = e
            continue
        return Allocation(value=value, number=number, attempts=attempts)

    raise IdentifierAllocationError(
        f"Could not reserve a ticket ID after {attempts} attempts. "
        f"Last error: {last_error if last_error is not None else 'no candidates'}"
    )
