"""Detection of unresolved template placeholders such as ``<AC 1>``."""

from __future__ import annotations

import re

from ticketflow.tickets.exceptions import PlaceholderError

PLACEHOLDER_RE = re.compile(r"<[A-Za-z0-9\s\-_]+>")


def find_placeholders(text: str) -> list[str]:
    """Return every distinct placeholder token in first-seen order."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(0), None)
    return list(seen)


def ensure_no_placeholders(text: str) -> None:
    """Raise PlaceholderError if ``text`` contains any placeholder token.

    Raises:
        PlaceholderError: With the detected tokens attached.
    """
    found = find_placeholders(text)
    if found:
        raise PlaceholderError(found)
