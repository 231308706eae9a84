"""Definition-of-Ready evaluation for ticket bodies."""

from __future__ import annotations

import re

from ticketflow.tickets.models import ChecklistResults, ReadinessResult
from ticketflow.tickets.normalization import (
    ACCEPTANCE_HEADING,
    CONSTRAINTS_HEADING,
    DELIVERABLE_HEADING,
    GOAL_HEADING,
    NON_GOALS_HEADING,
    canonical_heading,
    normalize_body,
)
from ticketflow.tickets.placeholders import find_placeholders

CHECKBOX_RE = re.compile(r"^\s*[-*+]\s+\[[ xX]\]")
PLAIN_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(?!\[[ xX]\])")
_TOP_LEVEL_HEADING_RE = re.compile(r"^ {0,3}#{1,2}\s")

MISSING_GOAL = "Goal (one sentence) missing or placeholder"
MISSING_DELIVERABLE = "Human-verifiable deliverable missing or placeholder"
MISSING_ACCEPTANCE = "Acceptance criteria checkboxes missing"
MISSING_CONSTRAINTS = "Constraints section missing or empty"
MISSING_NON_GOALS = "Non-goals section missing or empty"


def _section_bounds(lines: list[str], heading: str) -> tuple[int, int] | None:
    """Line range ``[start, end)`` of a section's content, or None if absent.

    A section ends at the next level 1-2 heading or at the next heading that
    names another Definition-of-Ready section.
    """
    start = None
    for i, line in enumerate(lines):
        if start is None:
            if canonical_heading(line) == heading:
                start = i + 1
            continue
        if _TOP_LEVEL_HEADING_RE.match(line) or canonical_heading(line) is not None:
            return start, i
    if start is None:
        return None
    return start, len(lines)


def section_content(body: str, heading: str) -> str | None:
    """Return the stripped content under ``heading``, or None if the section is absent."""
    lines = body.split("\n")
    bounds = _section_bounds(lines, heading)
    if bounds is None:
        return None
    start, end = bounds
    return "\n".join(lines[start:end]).strip()


def _filled(content: str | None) -> bool:
    return bool(content) and not find_placeholders(content)


def evaluate_readiness(body: str) -> ReadinessResult:
    """Evaluate a ticket body against the Definition of Ready.

    Args:
        body: Markdown body; headings need not be normalized.

    Returns:
        ReadinessResult with one missing item per failing check.
    """
    goal = _filled(section_content(body, GOAL_HEADING))
    deliverable = _filled(section_content(body, DELIVERABLE_HEADING))

    acceptance = section_content(body, ACCEPTANCE_HEADING) or ""
    acceptance_ok = any(CHECKBOX_RE.match(line) for line in acceptance.split("\n"))

    constraints_ok = bool(section_content(body, CONSTRAINTS_HEADING))
    non_goals_ok = bool(section_content(body, NON_GOALS_HEADING))

    placeholders = find_placeholders(body)

    missing: list[str] = []
    if not goal:
        missing.append(MISSING_GOAL)
    if not deliverable:
        missing.append(MISSING_DELIVERABLE)
    if not acceptance_ok:
        missing.append(MISSING_ACCEPTANCE)
    if not constraints_ok:
        missing.append(MISSING_CONSTRAINTS)
    if not non_goals_ok:
        missing.append(MISSING_NON_GOALS)
    if placeholders:
        missing.append(f"Unresolved placeholders: {', '.join(placeholders)}")

    checklist = ChecklistResults(
        goal=goal,
        deliverable=deliverable,
        acceptance_criteria=acceptance_ok,
        constraints_non_goals=constraints_ok and non_goals_ok,
        no_placeholders=not placeholders,
    )
    return ReadinessResult(
        ready=checklist.all_passed(),
        missing_items=missing,
        checklist_results=checklist,
    )


def convert_bullets_to_checkboxes(body: str) -> str:
    """Rewrite plain bullets in the Acceptance criteria section as ``- [ ]`` items."""
    lines = body.split("\n")
    bounds = _section_bounds(lines, ACCEPTANCE_HEADING)
    if bounds is None:
        return body
    start, end = bounds
    for i in range(start, end):
        lines[i] = PLAIN_BULLET_RE.sub(r"\1- [ ] ", lines[i], count=1)
    return "\n".join(lines)


def apply_checkbox_fix(
    body: str, display_id: str | None = None
) -> tuple[str, ReadinessResult, bool]:
    """Try turning acceptance bullets into checkboxes when that alone is missing.

    The rewritten body is re-normalized and evaluated once. It is kept only if
    it is ready; otherwise the original body and its result are returned.

    Args:
        body: Normalized ticket body.
        display_id: Passed to the re-normalization, when known.

    Returns:
        Tuple of (body, readiness of that body, whether the fix was applied).
    """
    result = evaluate_readiness(body)
    if result.ready or result.checklist_results.acceptance_criteria:
        return body, result, False

    converted = convert_bullets_to_checkboxes(body)
    if converted == body:
        return body, result, False

    fixed = normalize_body(converted, display_id)
    fixed_result = evaluate_readiness(fixed)
    if not fixed_result.ready:
        return body, result, False
    return fixed, fixed_result, True
