"""Unit tests for Definition-of-Ready evaluation and the checkbox auto-fix."""

import pytest

from ticketflow.tickets.normalization import ACCEPTANCE_HEADING, GOAL_HEADING
from ticketflow.tickets.readiness import (
    MISSING_ACCEPTANCE,
    MISSING_CONSTRAINTS,
    MISSING_DELIVERABLE,
    MISSING_GOAL,
    MISSING_NON_GOALS,
    apply_checkbox_fix,
    convert_bullets_to_checkboxes,
    evaluate_readiness,
    section_content,
)


@pytest.mark.unit
class TestSectionContent:
    """Tests for section extraction."""

    def test_content_until_next_section(self, ready_body: str) -> None:
        content = section_content(ready_body, GOAL_HEADING)
        assert content == "Let visitors sign in from the page header."

    def test_missing_section(self) -> None:
        assert section_content("## Constraints\nNone", GOAL_HEADING) is None

    def test_subheadings_belong_to_section(self) -> None:
        body = "## Goal (one sentence)\n### Why\nBecause.\n## Notes\nx"
        assert section_content(body, GOAL_HEADING) == "### Why\nBecause."

    def test_unnormalized_headings(self) -> None:
        body = "### goal:\nShip it.\n### Constraints\nNone"
        assert section_content(body, GOAL_HEADING) == "Ship it."


@pytest.mark.unit
class TestEvaluateReadiness:
    """Tests for evaluate_readiness."""

    def test_ready_body(self, ready_body: str) -> None:
        result = evaluate_readiness(ready_body)

        assert result.ready is True
        assert result.missing_items == []
        assert result.checklist_results.all_passed()

    def test_missing_constraints(self, body_without_constraints: str) -> None:
        result = evaluate_readiness(body_without_constraints)

        assert result.ready is False
        assert result.missing_items == [MISSING_CONSTRAINTS]
        assert result.checklist_results.constraints_non_goals is False
        assert result.checklist_results.goal is True

    def test_empty_body(self) -> None:
        result = evaluate_readiness("")

        assert result.ready is False
        assert result.missing_items == [
            MISSING_GOAL,
            MISSING_DELIVERABLE,
            MISSING_ACCEPTANCE,
            MISSING_CONSTRAINTS,
            MISSING_NON_GOALS,
        ]
        assert result.checklist_results.no_placeholders is True

    def test_plain_bullets_do_not_count_as_checkboxes(
        self, body_with_plain_bullets: str
    ) -> None:
        result = evaluate_readiness(body_with_plain_bullets)

        assert result.ready is False
        assert result.missing_items == [MISSING_ACCEPTANCE]

    def test_checked_boxes_count(self, ready_body: str) -> None:
        body = ready_body.replace("- [ ] The button", "- [x] The button")
        assert evaluate_readiness(body).ready is True

    def test_placeholder_in_goal(self, ready_body: str) -> None:
        body = ready_body.replace("Let visitors sign in from the page header.", "<goal>")
        result = evaluate_readiness(body)

        assert result.ready is False
        assert MISSING_GOAL in result.missing_items
        assert "Unresolved placeholders: <goal>" in result.missing_items
        assert result.checklist_results.no_placeholders is False

    def test_empty_non_goals_section(self, ready_body: str) -> None:
        body = ready_body.replace("- Social login providers\n", "")
        result = evaluate_readiness(body)

        assert result.missing_items == [MISSING_NON_GOALS]


@pytest.mark.unit
class TestCheckboxFix:
    """Tests for the acceptance-criteria auto-fix."""

    def test_convert_only_touches_acceptance_section(
        self, body_with_plain_bullets: str
    ) -> None:
        converted = convert_bullets_to_checkboxes(body_with_plain_bullets)

        assert "- [ ] The button is visible on every page" in converted
        assert "- [ ] Clicking the button opens the sign-in dialog" in converted
        assert "- Reuse the existing button component" in converted
        assert "- Social login providers" in converted

    def test_fix_applied_when_it_makes_ticket_ready(self, body_with_plain_bullets: str) -> None:
        body, result, fixed = apply_checkbox_fix(body_with_plain_bullets.strip())

        assert fixed is True
        assert result.ready is True
        assert ACCEPTANCE_HEADING in body
        assert "- [ ] The button is visible on every page" in body

    def test_fix_discarded_when_other_items_fail(self, body_with_plain_bullets: str) -> None:
        """Goal and acceptance both failing: body is left untouched."""
        original = body_with_plain_bullets.replace(
            "Let visitors sign in from the page header.\n", ""
        )

        body, result, fixed = apply_checkbox_fix(original)

        assert fixed is False
        assert body == original
        assert result.ready is False
        assert MISSING_ACCEPTANCE in result.missing_items

    def test_ready_body_unchanged(self, ready_body: str) -> None:
        body, result, fixed = apply_checkbox_fix(ready_body)

        assert body == ready_body
        assert fixed is False
        assert result.ready is True

    def test_no_bullets_nothing_to_fix(self, ready_body: str) -> None:
        original = ready_body.replace(
            "- [ ] The button is visible on every page\n"
            "- [ ] Clicking the button opens the sign-in dialog\n",
            "The button works.\n",
        )

        body, result, fixed = apply_checkbox_fix(original)

        assert fixed is False
        assert body == original
        assert result.missing_items == [MISSING_ACCEPTANCE]
