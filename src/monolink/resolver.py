"""Package location — finds the installed manifest of a named dependency.

Resolution walks the node_modules directories from a start directory up to
the filesystem root, the same search Node performs. Two strategies run in
order:

  1. An export-aware lookup of ``<name>/package.json``. A package whose
     ``exports`` map does not expose its manifest makes this lookup fail,
     exactly as ``require.resolve`` does.
  2. A plain scan of the candidate directories for ``<name>/package.json``.

Key class: ModuleResolver.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from .errors import PackagePathNotExportedError, ResolutionError
from .manifest import read_manifest
from .settings import LinkConfig

logger = logging.getLogger(__name__)

# Conditions matched when an export target is a conditional object
_EXPORT_CONDITIONS = ("node", "require", "default")


def node_module_paths(start: Path, modules_dir_name: str = "node_modules") -> list[Path]:
    """Return the dependency directories searched from ``start``, nearest first."""
    start = Path(start)
    return [directory / modules_dir_name for directory in (start, *start.parents)]


def exports_target(exports: Any, subpath: str) -> str | None:
    """Map a ``./``-prefixed subpath through a package ``exports`` field.

    Returns the package-relative target, or None when the subpath is not
    exported.
    """
    if not _is_subpath_map(exports):
        # String, array or conditions object: sugar for {".": exports}
        return _resolve_target(exports, "") if subpath == "." else None

    if subpath in exports and "*" not in subpath:
        return _resolve_target(exports[subpath], "")

    best: tuple[int, int, str, str] | None = None
    for key in exports:
        star = key.find("*")
        if star == -1 or key.count("*") > 1:
            continue
        prefix, suffix = key[:star], key[star + 1 :]
        if (
            subpath.startswith(prefix)
            and subpath != prefix
            and subpath.endswith(suffix)
            and len(subpath) >= len(key)
        ):
            match = subpath[len(prefix) : len(subpath) - len(suffix)]
            rank = (len(prefix), len(key), key, match)
            if best is None or rank[:2] > best[:2]:
                best = rank
    if best is not None:
        return _resolve_target(exports[best[2]], best[3])

    # Legacy folder mappings: {"./": "./"} or {"./lib/": "./dist/"}
    folders = [k for k in exports if k.endswith("/") and subpath.startswith(k)]
    if folders:
        key = max(folders, key=len)
        target = _resolve_target(exports[key], "")
        if target is not None and target.endswith("/"):
            return target + subpath[len(key) :]
    return None


def _is_subpath_map(exports: Any) -> bool:
    return isinstance(exports, dict) and any(k.startswith(".") for k in exports)


def _resolve_target(target: Any, match: str) -> str | None:
    if isinstance(target, str):
        if not target.startswith("./"):
            return None
        return target.replace("*", match)
    if isinstance(target, list):
        for item in target:
            resolved = _resolve_target(item, match)
            if resolved is not None:
                return resolved
        return None
    if isinstance(target, dict):
        for condition, value in target.items():
            if condition in _EXPORT_CONDITIONS:
                resolved = _resolve_target(value, match)
                if resolved is not None:
                    return resolved
        return None
    # null target explicitly blocks the subpath
    return None


class ModuleResolver:
    """Locates installed packages for one LinkConfig."""

    def __init__(self, config: LinkConfig) -> None:
        self.config = config

    def candidate_paths(self, from_dir: Path) -> list[Path]:
        return node_module_paths(from_dir, self.config.modules_dir_name)

    def resolve_manifest(self, name: str, from_dir: Path) -> Path:
        """Return the real path of ``name``'s manifest as seen from ``from_dir``.

        Raises:
            ResolutionError: If neither strategy finds the package.
        """
        candidates = self.candidate_paths(from_dir)
        try:
            found = self._lookup_exported(name, from_dir, candidates)
        except ResolutionError as e:
            logger.debug("Export-aware lookup of '%s' failed (%s); scanning paths", name, e)
            found = self._scan(name, from_dir, candidates)
        return Path(os.path.realpath(found))

    async def resolve(self, name: str, from_dir: Path) -> Path:
        return await asyncio.to_thread(self.resolve_manifest, name, from_dir)

    def _lookup_exported(self, name: str, from_dir: Path, candidates: list[Path]) -> Path:
        manifest_name = self.config.manifest_name
        for candidate in candidates:
            manifest_path = candidate / name / manifest_name
            if not manifest_path.is_file():
                continue
            manifest = read_manifest(manifest_path)
            if not manifest.has_exports:
                return manifest_path
            target = exports_target(manifest.exports, f"./{manifest_name}")
            if target is not None and os.path.normpath(
                manifest_path.parent / target
            ) == os.path.normpath(manifest_path):
                return manifest_path
            raise PackagePathNotExportedError(
                name,
                from_dir,
                candidates,
                message=f"'./{manifest_name}' is not exported by {manifest_path}",
            )
        raise ResolutionError(name, from_dir, candidates)

    def _scan(self, name: str, from_dir: Path, candidates: list[Path]) -> Path:
        for candidate in candidates:
            manifest_path = candidate / name / self.config.manifest_name
            if manifest_path.is_file():
                return manifest_path
        raise ResolutionError(name, from_dir, candidates)
