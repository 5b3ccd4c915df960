"""package.json reading.

Manifests are parsed fresh on every call and never cached, so the view
always matches the disk, including links created earlier in the same run.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ManifestNotFoundError, ManifestParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Manifest:
    """The fields of a package.json that linking cares about."""

    path: Path
    dependencies: tuple[str, ...] = ()
    workspaces: tuple[str, ...] = ()
    exports: Any = None

    @property
    def has_exports(self) -> bool:
        return self.exports is not None


def read_manifest(manifest_path: Path, root: bool = False) -> Manifest:
    """Read and parse one manifest file.

    ``workspaces`` is only read for the workspace root manifest (``root=True``);
    installed packages may carry any value there.

    Raises:
        ManifestNotFoundError: If the file does not exist.
        ManifestParseError: If it is not JSON or a field has the wrong shape.
    """
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestNotFoundError(f"Manifest not found: {manifest_path}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"Invalid JSON in {manifest_path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(f"Manifest {manifest_path} is not a JSON object")

    return Manifest(
        path=manifest_path,
        dependencies=_parse_dependencies(manifest_path, data.get("dependencies")),
        workspaces=(
            _parse_workspaces(manifest_path, data.get("workspaces")) if root else ()
        ),
        exports=data.get("exports"),
    )


async def load_manifest(manifest_path: Path, root: bool = False) -> Manifest:
    """Async wrapper around read_manifest() that keeps the event loop free."""
    return await asyncio.to_thread(read_manifest, manifest_path, root)


def _parse_dependencies(manifest_path: Path, raw: Any) -> tuple[str, ...]:
    # Published packages sometimes ship "dependencies": []
    if raw is None or raw == [] or raw == {}:
        return ()
    if not isinstance(raw, dict):
        raise ManifestParseError(f"'dependencies' in {manifest_path} must be an object")
    return tuple(raw)


def _parse_workspaces(manifest_path: Path, raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    # Yarn also accepts {"packages": [...], "nohoist": [...]}
    if isinstance(raw, dict):
        raw = raw.get("packages", [])
    if not isinstance(raw, list) or not all(isinstance(w, str) for w in raw):
        raise ManifestParseError(
            f"'workspaces' in {manifest_path} must be a list of paths"
        )
    return tuple(raw)
