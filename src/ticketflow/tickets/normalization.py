"""Canonicalization of ticket bodies before they are stored or evaluated.

Two rewrites are applied:

* headings that name a Definition-of-Ready section are rewritten into the
  exact form the readiness evaluator looks for, whatever their level, casing
  or trailing decoration (``### goal:`` becomes ``## Goal (one sentence)``);
* the first ``- **Title**: ...`` line is rewritten to carry the ticket's
  display id, replacing whatever identifier it carried before.

Both rewrites are idempotent.
"""

from __future__ import annotations

import re

GOAL_HEADING = "## Goal (one sentence)"
DELIVERABLE_HEADING = "## Human-verifiable deliverable (UI-only)"
ACCEPTANCE_HEADING = "## Acceptance criteria (UI-only)"
CONSTRAINTS_HEADING = "## Constraints"
NON_GOALS_HEADING = "## Non-goals"

# Lowercased heading text (decoration removed, separators collapsed) -> canonical heading
_CANONICAL_HEADINGS = {
    "goal": GOAL_HEADING,
    "goals": GOAL_HEADING,
    "human verifiable deliverable": DELIVERABLE_HEADING,
    "human verifiable deliverables": DELIVERABLE_HEADING,
    "deliverable": DELIVERABLE_HEADING,
    "deliverables": DELIVERABLE_HEADING,
    "acceptance criteria": ACCEPTANCE_HEADING,
    "acceptance criterion": ACCEPTANCE_HEADING,
    "constraints": CONSTRAINTS_HEADING,
    "constraint": CONSTRAINTS_HEADING,
    "non goals": NON_GOALS_HEADING,
    "non goal": NON_GOALS_HEADING,
    "nongoals": NON_GOALS_HEADING,
}

HEADING_RE = re.compile(r"^ {0,3}#{1,6}\s+(?P<text>.+?)\s*#*\s*$")
_DECORATION_RE = re.compile(r"\s*(?:\([^)]*\))?\s*:?\s*$")
_SEPARATOR_RE = re.compile(r"[\s\-_]+")

TITLE_LINE_RE = re.compile(r"(- \*\*Title\*\*:[ \t]*)(.+?)[ \t]*(?=\n|$)")
# "0048 — ", "HAL-0048 - ", "ACME-0001 – "; a plain hyphen needs whitespace before it
_PRIOR_ID_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9]*-)?\d{4,}(?:\s*[—–]|\s+-)\s*")


def _heading_key(text: str) -> str:
    text = text.strip().strip("*_").strip()
    text = _DECORATION_RE.sub("", text)
    return _SEPARATOR_RE.sub(" ", text).strip().lower()


def canonical_heading(line: str) -> str | None:
    """Return the canonical form of a heading line, or None if it names no section."""
    match = HEADING_RE.match(line)
    if match is None:
        return None
    return _CANONICAL_HEADINGS.get(_heading_key(match.group("text")))


def normalize_headings(body: str) -> str:
    lines = body.split("\n")
    for i, line in enumerate(lines):
        canonical = canonical_heading(line)
        if canonical is not None:
            lines[i] = canonical
    return "\n".join(lines)


def strip_prior_id(title: str) -> str:
    """Remove a leading ticket identifier and its dash separator from a title."""
    return _PRIOR_ID_RE.sub("", title.strip(), count=1)


def normalize_title_line(body: str, display_id: str) -> str:
    """Rewrite the first Title line as ``<display_id> — <title text>``.

    A body without a Title line is returned unchanged.
    """

    def _rewrite(match: re.Match[str]) -> str:
        title = strip_prior_id(match.group(2))
        return f"{match.group(1)}{display_id} — {title}".rstrip()

    return TITLE_LINE_RE.sub(_rewrite, body, count=1)


def normalize_body(body: str, display_id: str | None = None) -> str:
    """Trim, canonicalize section headings and, given a display id, the Title line.

    Args:
        body: Markdown body as supplied by the caller.
        display_id: Identifier to embed in the Title line, when known.

    Returns:
        The normalized body. Normalizing it again yields the same text.
    """
    result = body.replace("\r\n", "\n").strip()
    result = normalize_headings(result)
    if display_id:
        result = normalize_title_line(result, display_id)
    return result
