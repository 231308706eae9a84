"""Repository probes - Check that a migration target exists."""

from ticketflow.repos.exceptions import RepositoryProbeError
from ticketflow.repos.probe import (
    GitHubRepositoryProbe,
    RepositoryProbe,
    StoreRepositoryProbe,
    create_probe,
)

__all__ = [
    "GitHubRepositoryProbe",
    "RepositoryProbe",
    "RepositoryProbeError",
    "StoreRepositoryProbe",
    "create_probe",
]
