"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from ticketflow.config import ConfigError, Settings, load_settings


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "ticketflow.yaml"
    path.write_text(
        "database: board.db\n"
        "default_repository: acme/web\n"
        "max_id_attempts: 5\n"
        "prefixes:\n"
        "  globex/api: api\n"
        "known_repositories:\n"
        "  - acme/mobile\n"
    )
    return path


@pytest.mark.unit
class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        settings = load_settings(environ={})

        assert settings == Settings()
        assert settings.probe == "store"
        assert settings.max_id_attempts == 10

    def test_yaml_file(self, config_file: Path) -> None:
        settings = load_settings(config_file, environ={})

        assert settings.database == "board.db"
        assert settings.default_repository == "acme/web"
        assert settings.max_id_attempts == 5
        assert settings.prefixes == {"globex/api": "API"}
        assert settings.known_repositories == ["acme/mobile"]

    def test_picks_up_file_in_working_directory(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(config_file.parent)

        assert load_settings(environ={}).database == "board.db"

    def test_environment_wins(self, config_file: Path) -> None:
        settings = load_settings(
            config_file,
            environ={
                "TICKETFLOW_DATABASE": ":memory:",
                "TICKETFLOW_MAX_ID_ATTEMPTS": "3",
                "TICKETFLOW_PROBE": "GitHub",
            },
        )

        assert settings.database == ":memory:"
        assert settings.max_id_attempts == 3
        assert settings.probe == "github"

    def test_github_token_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert load_settings(environ={"GITHUB_TOKEN": "ghp_a"}).github_token == "ghp_a"
        assert (
            load_settings(
                environ={"GITHUB_TOKEN": "ghp_a", "TICKETFLOW_GITHUB_TOKEN": "ghp_b"}
            ).github_token
            == "ghp_b"
        )

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "absent.yaml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("database: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path, environ={})

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path, environ={})

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_settings(path, environ={}) == Settings()


@pytest.mark.unit
class TestSettingsValidation:
    """Tests for Settings.from_dict."""

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            Settings.from_dict({"colour": "blue"})

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"probe": "gitlab"}, "probe must be one of"),
            ({"store_timeout": "soon"}, "store_timeout must be a number"),
            ({"probe_timeout": 0}, "probe_timeout must be positive"),
            ({"max_id_attempts": 0}, "max_id_attempts must be at least 1"),
            ({"default_repository": "web"}, "default_repository must look like"),
            ({"prefixes": ["ACME"]}, "prefixes must be a mapping"),
            ({"prefixes": {"acme/web": "1X"}}, "Invalid prefix"),
            ({"known_repositories": "acme/web"}, "known_repositories must be a list"),
        ],
    )
    def test_invalid_values(self, data: dict, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            Settings.from_dict(data)

    def test_log_level_upper_cased(self) -> None:
        assert Settings.from_dict({"log_level": "debug"}).log_level == "DEBUG"
