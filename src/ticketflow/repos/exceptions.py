"""Custom exceptions for repository probes."""


class RepositoryProbeError(Exception):
    """The probe could not determine whether a repository exists."""
