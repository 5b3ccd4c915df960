"""Link settings — reads monolink.toml + .env to produce a LinkConfig.

All paths are resolved once at load time and carried in an immutable
LinkConfig that every component receives explicitly; nothing reads the
environment after load_settings() returns.

Key entities:
  - LinkConfig: frozen dataclass with the resolved target and workspace paths.
  - load_settings(): parse .env + monolink.toml → LinkConfig.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "monolink.toml"

# ---------------------------------------------------------------------------
# LinkConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LinkConfig:
    """Resolved configuration for one target package.

    ``service_path`` is the package being prepared for deployment and
    ``workspace_path`` the monorepo root holding the workspace manifest.
    """

    service_path: Path
    workspace_path: Path
    modules_dir_name: str = "node_modules"
    manifest_name: str = "package.json"
    log_level: str = "INFO"

    @property
    def modules_dir(self) -> Path:
        """Dependency directory of the target package."""
        return self.modules_dir_for(self.service_path)

    @property
    def root_manifest(self) -> Path:
        return self.manifest_for(self.workspace_path)

    def modules_dir_for(self, package_dir: Path) -> Path:
        return package_dir / self.modules_dir_name

    def manifest_for(self, package_dir: Path) -> Path:
        return package_dir / self.manifest_name

    def workspace_dir_for(self, member: str) -> Path:
        """Return the absolute directory of a workspace member path."""
        return self.workspace_path / member


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------

# monolink.toml key -> LinkConfig field for plain string settings
_STRING_KEYS = {
    "modules_dir": "modules_dir_name",
    "manifest": "manifest_name",
    "log_level": "log_level",
}

_PATH_KEYS = {"path", "workspace_path"}


def load_settings(service_dir: Path | None = None) -> LinkConfig:
    """Read .env + monolink.toml and return a LinkConfig.

    Args:
        service_dir: Directory of the package to link. Defaults to the cwd.

    Returns:
        The resolved LinkConfig.

    Raises:
        FileNotFoundError: If the service directory does not exist.
        ValueError: If monolink.toml holds unknown keys or non-string values.
    """
    if service_dir is None:
        service_dir = Path.cwd()
    service_dir = Path(service_dir).expanduser().resolve()
    if not service_dir.is_dir():
        raise FileNotFoundError(f"Service directory not found: {service_dir}")

    # Load .env files (local cwd first, then the service dir)
    local_env = Path(".env")
    service_env = service_dir / ".env"
    if local_env.is_file():
        load_dotenv(local_env)
    if service_env.is_file():
        load_dotenv(service_env)

    raw = _read_settings_file(service_dir / SETTINGS_FILE_NAME)

    path_value = os.getenv("MONOLINK_PATH") or raw.get("path")
    service_path = _resolve_path(service_dir, path_value) if path_value else service_dir

    workspace_value = os.getenv("MONOLINK_WORKSPACE_PATH") or raw.get("workspace_path")
    if workspace_value:
        workspace_path = _resolve_path(service_dir, workspace_value)
    else:
        # Workspace root is one level up from the package
        workspace_path = service_path.parent

    overrides: dict[str, str] = {}
    for key, field_name in _STRING_KEYS.items():
        if key in raw:
            overrides[field_name] = raw[key]
    env_level = os.getenv("MONOLINK_LOG_LEVEL")
    if env_level:
        overrides["log_level"] = env_level
    if "log_level" in overrides:
        level = overrides["log_level"].upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {overrides['log_level']}")
        overrides["log_level"] = level

    cfg = LinkConfig(
        service_path=service_path,
        workspace_path=workspace_path,
        **overrides,
    )
    logger.debug(
        "Settings: service=%s workspace=%s modules_dir=%s",
        cfg.service_path,
        cfg.workspace_path,
        cfg.modules_dir_name,
    )
    return cfg


def _read_settings_file(toml_path: Path) -> dict[str, str]:
    """Read and validate monolink.toml. A missing file yields no settings."""
    if not toml_path.is_file():
        return {}

    with open(toml_path, "rb") as f:
        raw = tomllib.load(f)

    unknown = set(raw) - _PATH_KEYS - set(_STRING_KEYS)
    if unknown:
        raise ValueError(
            f"Unknown key(s) in {toml_path.name}: {', '.join(sorted(unknown))}"
        )
    for key, value in raw.items():
        if not isinstance(value, str) or not value:
            raise ValueError(f"'{key}' in {toml_path.name} must be a non-empty string.")
    return raw


def _resolve_path(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()
