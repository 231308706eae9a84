"""Ordering of tickets within a Kanban column.

Positions are integer sort keys; ascending order is rendering order and gaps
are allowed. Two concurrent appends to the same column can compute the same
position. The tie is harmless (ties render in sequence-number order) and the next
append moves past it, so no locking is done.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ticketflow.tickets.exceptions import InvalidPlacementError

if TYPE_CHECKING:
    from collections.abc import Sequence

TOP = "top"
BOTTOM = "bottom"

Placement = int | str


def parse_placement(value: int | str | None) -> Placement:
    """Validate a requested position.

    Args:
        value: ``"top"``, ``"bottom"``, a non-negative index (int or numeric
            string), or None for bottom.

    Returns:
        TOP, BOTTOM or an int index.

    Raises:
        InvalidPlacementError: For anything else.
    """
    if value is None:
        return BOTTOM
    if isinstance(value, bool):
        raise InvalidPlacementError(f"Invalid position: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidPlacementError(f"Position index must be >= 0, got {value}")
        return value
    text = str(value).strip().lower()
    if text in (TOP, BOTTOM):
        return text
    if text.isdigit():
        return int(text)
    raise InvalidPlacementError(
        f"Invalid position '{value}': use 'top', 'bottom' or a non-negative index"
    )


def append_position(max_position: int | None) -> int:
    """Position after the current maximum; 0 for an empty column."""
    return 0 if max_position is None else max_position + 1


def plan_placement(
    members: Sequence[tuple[str, int]],
    placement: Placement,
    ticket_pk: str,
) -> tuple[int, list[tuple[str, int]]]:
    """Compute where a ticket lands and which siblings move down.

    The ticket is ranked among the other members. Members ranked before it
    keep their positions, even when they share one. Members from its rank on
    are pushed down only as far as needed to sort strictly after it.

    Args:
        members: ``(pk, position)`` of the destination column, in rendering
            order. The ticket itself is ignored if present.
        placement: Result of :func:`parse_placement`.
        ticket_pk: The ticket being placed.

    Returns:
        Tuple of (new position, shifted), where shifted lists the
        ``(pk, new position)`` of every sibling that must be rewritten in the
        same write.
    """
    others = [(pk, position) for pk, position in members if pk != ticket_pk]
    if not others:
        return 0, []

    if placement == TOP:
        index = 0
    elif placement == BOTTOM:
        index = len(others)
    else:
        index = int(placement)
    if index >= len(others):
        return append_position(max(position for _, position in others)), []

    if index == 0:
        first = others[0][1]
        position = min(0, first) if placement == TOP else first
    else:
        position = max(others[index][1], others[index - 1][1] + 1)

    shifted = []
    last = position
    for pk, current in others[index:]:
        if current <= last:
            current = last + 1
            shifted.append((pk, current))
        last = current
    return position, shifted
