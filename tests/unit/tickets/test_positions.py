"""Unit tests for column position planning."""

import pytest

from ticketflow.tickets import InvalidPlacementError
from ticketflow.tickets.positions import (
    BOTTOM,
    TOP,
    append_position,
    parse_placement,
    plan_placement,
)

MEMBERS = [("a", 0), ("b", 1), ("c", 4)]


@pytest.mark.unit
class TestParsePlacement:
    """Tests for parse_placement."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, BOTTOM), ("bottom", BOTTOM), ("TOP", TOP), (" top ", TOP), (0, 0), ("3", 3)],
    )
    def test_valid(self, value: object, expected: object) -> None:
        assert parse_placement(value) == expected  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", [-1, "-1", "middle", "1.5", "", True])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(InvalidPlacementError):
            parse_placement(value)  # type: ignore[arg-type]


@pytest.mark.unit
class TestPlanPlacement:
    """Tests for plan_placement."""

    def test_append_position(self) -> None:
        assert append_position(None) == 0
        assert append_position(4) == 5

    def test_empty_column(self) -> None:
        assert plan_placement([], TOP, "x") == (0, [])
        assert plan_placement([], 3, "x") == (0, [])

    def test_bottom(self) -> None:
        assert plan_placement(MEMBERS, BOTTOM, "x") == (5, [])

    def test_top_pushes_down_only_what_collides(self) -> None:
        assert plan_placement(MEMBERS, TOP, "x") == (0, [("a", 1), ("b", 2)])

    def test_top_below_negative_positions(self) -> None:
        assert plan_placement([("a", -2), ("b", 3)], TOP, "x") == (-2, [("a", -1)])

    def test_top_of_column_with_gap(self) -> None:
        assert plan_placement([("a", 3)], TOP, "x") == (0, [])

    def test_index_takes_member_position(self) -> None:
        assert plan_placement(MEMBERS, 2, "x") == (4, [("c", 5)])
        assert plan_placement(MEMBERS, 1, "x") == (1, [("b", 2)])

    def test_index_past_end_appends(self) -> None:
        assert plan_placement(MEMBERS, 3, "x") == (5, [])

    def test_index_among_tied_positions(self) -> None:
        """Members ranked before the index keep their place even when tied."""
        members = [("t1", 0), ("t2", 1), ("t3", 1), ("t4", 2)]

        assert plan_placement(members, 2, "t5") == (2, [("t3", 3), ("t4", 4)])
        assert plan_placement(members, 1, "t5") == (1, [("t2", 2), ("t3", 3), ("t4", 4)])

    def test_ticket_itself_ignored(self) -> None:
        """Moving a member within its own column ranks it among the others."""
        assert plan_placement(MEMBERS, BOTTOM, "c") == (2, [])
        assert plan_placement(MEMBERS, 1, "a") == (4, [("c", 5)])
        assert plan_placement([("a", 0)], TOP, "a") == (0, [])
