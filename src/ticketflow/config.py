"""Configuration loading for ticketflow.

Settings come from an optional ``ticketflow.yaml`` file, then from
``TICKETFLOW_*`` environment variables, which win over the file.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from collections.abc import Mapping

CONFIG_FILENAME = "ticketflow.yaml"
PROBES = ("store", "github")
REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")

# Environment variable -> settings key
ENV_OVERRIDES = {
    "TICKETFLOW_DATABASE": "database",
    "TICKETFLOW_DEFAULT_REPOSITORY": "default_repository",
    "TICKETFLOW_STORE_TIMEOUT": "store_timeout",
    "TICKETFLOW_PROBE": "probe",
    "TICKETFLOW_PROBE_TIMEOUT": "probe_timeout",
    "TICKETFLOW_GITHUB_API_URL": "github_api_url",
    "TICKETFLOW_GITHUB_TOKEN": "github_token",
    "TICKETFLOW_MAX_ID_ATTEMPTS": "max_id_attempts",
    "TICKETFLOW_LOG_DIR": "log_dir",
    "TICKETFLOW_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        database: SQLite path, ":memory:", or a SQLAlchemy URL.
        default_repository: Repository used when a call names none.
        store_timeout: Seconds allowed for one store round-trip.
        probe: Repository existence probe, "store" or "github".
        probe_timeout: Seconds allowed for one probe request.
        github_api_url: REST API root for the GitHub probe.
        github_token: Token for the GitHub probe (falls back to GITHUB_TOKEN).
        max_id_attempts: Candidate numbers tried before giving up on a create.
        prefixes: Repository full name -> display-id prefix overrides.
        known_repositories: Repositories that exist even without tickets.
        log_dir: Directory for rotating log files.
        log_level: Log level name.
    """

    database: str = "ticketflow.db"
    default_repository: str | None = None
    store_timeout: float = 20.0
    probe: str = "store"
    probe_timeout: float = 25.0
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    max_id_attempts: int = 10
    prefixes: dict[str, str] = field(default_factory=dict)
    known_repositories: list[str] = field(default_factory=list)
    log_dir: str = "logs"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Create settings from a dictionary, validating every value.

        Args:
            data: Configuration dictionary from YAML and/or the environment.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a key is unknown or a value is invalid.
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        defaults = cls()
        settings = cls(
            database=str(data.get("database", defaults.database)),
            default_repository=data.get("default_repository") or None,
            store_timeout=_positive_float(data, "store_timeout", defaults.store_timeout),
            probe=str(data.get("probe", defaults.probe)).lower(),
            probe_timeout=_positive_float(data, "probe_timeout", defaults.probe_timeout),
            github_api_url=str(data.get("github_api_url", defaults.github_api_url)).rstrip("/"),
            github_token=data.get("github_token") or None,
            max_id_attempts=_positive_int(data, "max_id_attempts", defaults.max_id_attempts),
            prefixes=_prefixes(data.get("prefixes") or {}),
            known_repositories=_repositories(data.get("known_repositories") or []),
            log_dir=str(data.get("log_dir", defaults.log_dir)),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )

        if settings.probe not in PROBES:
            raise ConfigError(f"probe must be one of {', '.join(PROBES)}, got '{settings.probe}'")
        if settings.default_repository is not None:
            _check_repository(settings.default_repository, "default_repository")
        return settings


def _positive_float(data: Mapping[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigError(f"{key} must be positive, got {number}")
    return number


def _positive_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e
    if number < 1:
        raise ConfigError(f"{key} must be at least 1, got {number}")
    return number


def _check_repository(name: str, key: str) -> None:
    if not REPOSITORY_RE.match(name):
        raise ConfigError(f"{key} must look like 'owner/name', got '{name}'")


def _prefixes(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError("prefixes must be a mapping of repository to prefix")
    prefixes = {}
    for repository, prefix in value.items():
        _check_repository(str(repository), "prefixes")
        if not re.fullmatch(r"[A-Za-z][A-Za-z0-9]*", str(prefix)):
            raise ConfigError(f"Invalid prefix for {repository}: '{prefix}'")
        prefixes[str(repository)] = str(prefix).upper()
    return prefixes


def _repositories(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError("known_repositories must be a list")
    for name in value:
        _check_repository(str(name), "known_repositories")
    return [str(name) for name in value]


def _read_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")
    return data


def load_settings(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from YAML and the environment.

    Args:
        config_path: Path to a YAML file. When omitted, ``ticketflow.yaml`` in
            the current directory is used if it exists.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Parsed settings.

    Raises:
        ConfigError: If an explicit file doesn't exist or any value is invalid.
    """
    if environ is None:
        environ = os.environ

    data: dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        data = _read_yaml(config_path)
    elif Path(CONFIG_FILENAME).exists():
        data = _read_yaml(Path(CONFIG_FILENAME))

    for env_var, key in ENV_OVERRIDES.items():
        if environ.get(env_var):
            data[key] = environ[env_var]

    if not data.get("github_token") and environ.get("GITHUB_TOKEN"):
        data["github_token"] = environ["GITHUB_TOKEN"]

    return Settings.from_dict(data)
