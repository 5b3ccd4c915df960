"""Shared fixtures for building throwaway monorepos on disk."""

import json
import os
from pathlib import Path

import pytest

from monolink.settings import LinkConfig


class Repo:
    """Writes package.json trees under a temporary workspace root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def package(
        self,
        package_dir: Path | str,
        dependencies: tuple[str, ...] | list[str] = (),
        name: str | None = None,
        **extra: object,
    ) -> Path:
        """Write a manifest into ``package_dir`` (relative to the root)."""
        package_dir = self.root / package_dir
        package_dir.mkdir(parents=True, exist_ok=True)
        data: dict[str, object] = {"name": name or package_dir.name, "version": "1.0.0"}
        if dependencies:
            data["dependencies"] = {dep: "*" for dep in dependencies}
        data.update(extra)
        (package_dir / "package.json").write_text(json.dumps(data))
        return package_dir

    def install(
        self,
        name: str,
        dependencies: tuple[str, ...] | list[str] = (),
        under: Path | str = "",
        **extra: object,
    ) -> Path:
        """Install ``name`` into ``<under>/node_modules`` (root by default)."""
        return self.package(
            Path(under) / "node_modules" / name, dependencies, name=name, **extra
        )

    def workspace_root(self, members: list[str]) -> Path:
        """Write the root manifest and yarn-style links for each member."""
        self.package(".", name="monorepo", private=True, workspaces=members)
        for member in members:
            link = self.root / "node_modules" / Path(member).name
            link.parent.mkdir(parents=True, exist_ok=True)
            if not os.path.lexists(link):
                os.symlink(os.path.relpath(self.root / member, link.parent), link)
        return self.root

    def config(self, service: str) -> LinkConfig:
        return LinkConfig(service_path=self.root / service, workspace_path=self.root)

    def links(self, directory: Path | str) -> dict[str, str]:
        """Map link names (``@scope/pkg`` for scoped) to their raw targets."""
        directory = self.root / directory
        result: dict[str, str] = {}
        if not directory.is_dir():
            return result
        for entry in sorted(directory.iterdir()):
            if entry.is_symlink():
                result[entry.name] = os.readlink(entry)
            elif entry.is_dir() and entry.name.startswith("@"):
                for scoped in sorted(entry.iterdir()):
                    if scoped.is_symlink():
                        result[f"{entry.name}/{scoped.name}"] = os.readlink(scoped)
        return result

    def snapshot(self) -> list[tuple[str, bool]]:
        """Every path under the root (not following links) with its link flag."""
        items = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            for name in dirnames + filenames:
                path = Path(dirpath) / name
                items.append((str(path.relative_to(self.root)), path.is_symlink()))
        return sorted(items)


@pytest.fixture
def repo(tmp_path: Path) -> Repo:
    root = tmp_path.resolve() / "repo"
    root.mkdir()
    return Repo(root)
