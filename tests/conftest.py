"""Shared pytest fixtures and configuration."""

from datetime import UTC, datetime

import pytest

from ticketflow.store import TicketStore
from ticketflow.tickets import TicketLifecycle

READY_BODY = """- **Title**: Add sign-in button

## Goal (one sentence)
Let visitors sign in from the page header.

## Human-verifiable deliverable (UI-only)
A "Sign in" button is visible in the top-right corner of the header.

## Acceptance criteria (UI-only)
- [ ] The button is visible on every page
- [ ] Clicking the button opens the sign-in dialog

## Constraints
- Reuse the existing button component

## Non-goals
- Social login providers
"""

BODY_WITHOUT_CONSTRAINTS = """- **Title**: Add sign-in button

## Goal (one sentence)
Let visitors sign in from the page header.

## Human-verifiable deliverable (UI-only)
A "Sign in" button is visible in the top-right corner of the header.

## Acceptance criteria (UI-only)
- [ ] The button is visible on every page

## Non-goals
- Social login providers
"""

BODY_WITH_PLAIN_BULLETS = """- **Title**: Add sign-in button

## Goal (one sentence)
Let visitors sign in from the page header.

## Human-verifiable deliverable (UI-only)
A "Sign in" button is visible in the top-right corner of the header.

## Acceptance criteria (UI-only)
- The button is visible on every page
* Clicking the button opens the sign-in dialog

## Constraints
- Reuse the existing button component

## Non-goals
- Social login providers
"""

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def ready_body() -> str:
    """A body that passes every Definition-of-Ready check."""
    return READY_BODY


@pytest.fixture
def body_without_constraints() -> str:
    return BODY_WITHOUT_CONSTRAINTS


@pytest.fixture
def body_with_plain_bullets() -> str:
    """Ready except that acceptance criteria are plain bullets."""
    return BODY_WITH_PLAIN_BULLETS


@pytest.fixture
def store():
    """Create an in-memory TicketStore."""
    s = TicketStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def legacy_store():
    """Create an in-memory TicketStore on the legacy schema."""
    s = TicketStore(":memory:", legacy_schema=True)
    yield s
    s.close()


@pytest.fixture
def lifecycle(store: TicketStore) -> TicketLifecycle:
    """TicketLifecycle scoped to acme/web by default."""
    return TicketLifecycle(store, default_repository="acme/web", clock=lambda: FIXED_NOW)
