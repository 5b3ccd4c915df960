"""Tests for settings.py — LinkConfig and load_settings."""

from pathlib import Path

import pytest

from monolink.settings import LinkConfig, load_settings


@pytest.fixture
def service(tmp_path: Path, monkeypatch) -> Path:
    # Keep the cwd's .env out of the picture
    monkeypatch.chdir(tmp_path)
    service = tmp_path.resolve() / "repo" / "packages" / "api"
    service.mkdir(parents=True)
    return service


# ---------------------------------------------------------------------------
# LinkConfig unit tests
# ---------------------------------------------------------------------------


class TestLinkConfig:
    def test_derived_paths(self, tmp_path: Path):
        cfg = LinkConfig(service_path=tmp_path / "api", workspace_path=tmp_path)
        assert cfg.modules_dir == tmp_path / "api" / "node_modules"
        assert cfg.root_manifest == tmp_path / "package.json"
        assert cfg.manifest_for(tmp_path / "x") == tmp_path / "x" / "package.json"
        assert cfg.workspace_dir_for("packages/ui") == tmp_path / "packages" / "ui"

    def test_defaults(self, tmp_path: Path):
        cfg = LinkConfig(service_path=tmp_path, workspace_path=tmp_path)
        assert cfg.modules_dir_name == "node_modules"
        assert cfg.manifest_name == "package.json"
        assert cfg.log_level == "INFO"

    def test_frozen(self, tmp_path: Path):
        cfg = LinkConfig(service_path=tmp_path, workspace_path=tmp_path)
        with pytest.raises(AttributeError):
            cfg.service_path = tmp_path / "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_settings tests
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_defaults_without_files(self, service: Path):
        cfg = load_settings(service)
        assert cfg.service_path == service
        assert cfg.workspace_path == service.parent

    def test_defaults_to_cwd(self, service: Path, monkeypatch):
        monkeypatch.chdir(service)
        assert load_settings().service_path == service

    def test_missing_service_dir(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope")

    def test_toml_overrides(self, service: Path):
        (service / "monolink.toml").write_text(
            'path = "."\n'
            'workspace_path = "../.."\n'
            'modules_dir = "deps"\n'
            'manifest = "manifest.json"\n'
            'log_level = "debug"\n'
        )
        cfg = load_settings(service)
        assert cfg.service_path == service
        assert cfg.workspace_path == service.parent.parent
        assert cfg.modules_dir_name == "deps"
        assert cfg.manifest_name == "manifest.json"
        assert cfg.log_level == "DEBUG"

    def test_path_moves_workspace_default(self, service: Path):
        (service / "app").mkdir()
        (service / "monolink.toml").write_text('path = "app"\n')
        cfg = load_settings(service)
        assert cfg.service_path == service / "app"
        assert cfg.workspace_path == service

    def test_env_overrides_file(self, service: Path, monkeypatch):
        (service / "monolink.toml").write_text('log_level = "debug"\n')
        monkeypatch.setenv("MONOLINK_LOG_LEVEL", "warning")
        monkeypatch.setenv("MONOLINK_WORKSPACE_PATH", str(service.parent.parent))
        cfg = load_settings(service)
        assert cfg.log_level == "WARNING"
        assert cfg.workspace_path == service.parent.parent

    def test_dotenv_in_service_dir(self, service: Path):
        (service / ".env").write_text("MONOLINK_LOG_LEVEL=error\n")
        assert load_settings(service).log_level == "ERROR"

    def test_unknown_key(self, service: Path):
        (service / "monolink.toml").write_text('colour = "blue"\n')
        with pytest.raises(ValueError, match="colour"):
            load_settings(service)

    def test_non_string_value(self, service: Path):
        (service / "monolink.toml").write_text("path = 3\n")
        with pytest.raises(ValueError, match="non-empty string"):
            load_settings(service)

    def test_bad_log_level(self, service: Path):
        (service / "monolink.toml").write_text('log_level = "chatty"\n')
        with pytest.raises(ValueError, match="log level"):
            load_settings(service)
