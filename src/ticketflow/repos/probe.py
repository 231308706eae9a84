"""Repository existence probes used before migrating a ticket."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx

from ticketflow.logging import sanitize_for_log, truncate_output
from ticketflow.repos.exceptions import RepositoryProbeError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ticketflow.config import Settings
    from ticketflow.store.store import TicketStore

logger = logging.getLogger("ticketflow.repos")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_PROBE_TIMEOUT = 25.0


class RepositoryProbe(Protocol):
    """Answers whether a repository exists and is reachable."""

    def exists(self, repository: str) -> bool: ...

    def close(self) -> None: ...


class StoreRepositoryProbe:
    """A repository exists if it owns tickets or is listed in configuration."""

    def __init__(self, store: TicketStore, known_repositories: Iterable[str] = ()) -> None:
        self.store = store
        self.known_repositories = set(known_repositories)

    def exists(self, repository: str) -> bool:
        if repository in self.known_repositories:
            return True
        return self.store.repository_exists(repository)

    def close(self) -> None:
        pass


class GitHubRepositoryProbe:
    """Checks ``GET /repos/{owner}/{name}`` on the GitHub REST API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        """Initialize the probe.

        Args:
            token: GitHub token; anonymous requests are made without one
            base_url: REST API root (for testing/enterprise)
            timeout: Seconds allowed for one request
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the REST API."""
        if self._client is None:
            headers = {"Accept": "application/vnd.github+json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.Client(headers=headers, timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def exists(self, repository: str) -> bool:
        """Check whether the repository exists and is visible to the token.

        Args:
            repository: Repository in "owner/name" format

        Returns:
            True on 200, False on 404

        Raises:
            RepositoryProbeError: On any other status or a transport failure
        """
        owner, _, name = repository.partition("/")
        if not owner or not name or "/" in name:
            return False

        try:
            response = self.client.get(f"{self.base_url}/repos/{owner}/{name}")
        except httpx.HTTPError as e:
            raise RepositoryProbeError(
                f"Repository check for {repository} failed: {sanitize_for_log(str(e))}"
            ) from e

        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False

        detail = sanitize_for_log(truncate_output(response.text, 200))
        logger.warning("Repository check for %s returned %d", repository, response.status_code)
        raise RepositoryProbeError(
            f"Repository check for {repository} failed: {response.status_code} - {detail}"
        )


def create_probe(settings: Settings, store: TicketStore) -> RepositoryProbe:
    """Build the probe selected by ``settings.probe``."""
    if settings.probe == "github":
        return GitHubRepositoryProbe(
            token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.probe_timeout,
        )
    return StoreRepositoryProbe(store, settings.known_repositories)
