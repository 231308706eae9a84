"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from ticketflow.config import Settings
from ticketflow.repos import RepositoryProbe, create_probe
from ticketflow.store import TicketStore
from ticketflow.tickets import TicketLifecycle

# Global instances (initialized on app startup)
_settings: Settings | None = None
_store: TicketStore | None = None
_probe: RepositoryProbe | None = None


def init_settings(settings: Settings) -> Settings:
    """Initialize the global Settings instance."""
    global _settings  # noqa: PLW0603
    _settings = settings
    return _settings


def get_settings() -> Settings:
    """Dependency that provides the Settings instance."""
    if _settings is None:
        raise RuntimeError("Settings not initialized. Call init_settings() first.")
    return _settings


def init_store(settings: Settings) -> TicketStore:
    """Initialize the global TicketStore instance."""
    global _store  # noqa: PLW0603
    _store = TicketStore(settings.database, timeout=settings.store_timeout)
    return _store


def close_store() -> None:
    """Close the global TicketStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[TicketStore, None, None]:
    """Dependency that provides the TicketStore instance."""
    if _store is None:
        raise RuntimeError("TicketStore not initialized. Call init_store() first.")
    yield _store


def init_probe(settings: Settings, store: TicketStore) -> RepositoryProbe:
    """Initialize the global repository probe selected by ``settings.probe``."""
    global _probe  # noqa: PLW0603
    _probe = create_probe(settings, store)
    return _probe


def close_probe() -> None:
    """Close the global repository probe."""
    global _probe  # noqa: PLW0603
    if _probe is not None:
        _probe.close()
        _probe = None


def get_probe() -> Generator[RepositoryProbe, None, None]:
    """Dependency that provides the repository probe."""
    if _probe is None:
        raise RuntimeError("Repository probe not initialized. Call init_probe() first.")
    yield _probe


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[TicketStore, Depends(get_store)]
ProbeDep = Annotated[RepositoryProbe, Depends(get_probe)]


def get_lifecycle(
    store: StoreDep, probe: ProbeDep, settings: SettingsDep
) -> TicketLifecycle:
    """Dependency that provides a TicketLifecycle for the current request."""
    return TicketLifecycle.from_settings(store, settings, probe=probe)


LifecycleDep = Annotated[TicketLifecycle, Depends(get_lifecycle)]
