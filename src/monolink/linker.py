"""Dependency graph linking — the recursive symlink builder.

For each dependency a pass resolves the installed package the way Node
would, links it into the pass's destination node_modules when it is hoisted
(at most one node_modules segment in its real path), then recurses into the
package's own dependencies concurrently.

Nested packages (two or more node_modules segments) are never linked; they
stay reachable through the already-linked package that contains them.

Key classes: LinkPass (per-pass dedup state), LinkGraphBuilder.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Coroutine, Iterable, Sequence

from .manifest import load_manifest
from .resolver import ModuleResolver
from .settings import LinkConfig

logger = logging.getLogger(__name__)


@dataclass
class LinkPass:
    """State shared by every branch of one top-level linkage pass.

    ``created`` holds the package names that already own a link under
    ``to_dir``; all concurrent branches check and update it under ``lock``.
    """

    to_dir: Path
    created: set[str] = field(default_factory=set)
    linked: list[Path] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    async def claim(self, name: str) -> bool:
        """Reserve ``name`` for linking. False if another branch already did."""
        async with self.lock:
            if name in self.created:
                return False
            self.created.add(name)
            return True


async def fan_out(coros: Iterable[Coroutine[Any, Any, None]]) -> None:
    """Run ``coros`` concurrently and wait for all of them.

    The first failure cancels the remaining tasks and is re-raised as is.
    """
    try:
        async with asyncio.TaskGroup() as group:
            for coro in coros:
                group.create_task(coro)
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0] from None


def link_target(name: str, package_dir: Path, to_dir: Path) -> str:
    """Relative symlink target for ``name`` placed under ``to_dir``.

    Scoped names (``@scope/pkg``) live one level deeper, so the target is
    computed from the scope directory.
    """
    namespace = str(PurePosixPath(name).parent)
    link_parent = to_dir if namespace == "." else to_dir / namespace
    return os.path.relpath(package_dir, link_parent)


def create_link(target: str, link_path: Path) -> bool:
    """Create a symlink, creating its parent directory as needed.

    Returns False when something already exists at ``link_path``.
    """
    link_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.symlink(target, link_path)
    except FileExistsError:
        return False
    return True


class LinkGraphBuilder:
    """Recursively links a dependency subtree into a destination directory."""

    def __init__(self, config: LinkConfig, resolver: ModuleResolver | None = None) -> None:
        self.config = config
        self.resolver = resolver or ModuleResolver(config)

    def modules_depth(self, manifest_path: Path) -> int:
        """Number of dependency-directory segments in ``manifest_path``."""
        return sum(1 for part in manifest_path.parts if part == self.config.modules_dir_name)

    async def link_package(
        self,
        name: str,
        from_dir: Path,
        link_pass: LinkPass,
        ancestry: Sequence[str] = (),
    ) -> None:
        """Link ``name`` (resolved from ``from_dir``) and its dependency tree.

        Args:
            name: Package name, optionally scoped.
            from_dir: Directory the resolution search starts from.
            link_pass: Destination directory and dedup state of this pass.
            ancestry: Names on the current recursion path.

        Raises:
            ResolutionError: If ``name`` or any transitive dependency is missing.
            ManifestParseError: If a resolved manifest is malformed.
            OSError: On any filesystem failure other than an existing link.
        """
        if name in ancestry:
            # Cycle: the ancestor's own subtree already covers this package
            return

        manifest_path = await self.resolver.resolve(name, from_dir)
        package_dir = manifest_path.parent

        if self.modules_depth(manifest_path) <= 1 and await link_pass.claim(name):
            link_path = link_pass.to_dir / name
            target = link_target(name, package_dir, link_pass.to_dir)
            if await asyncio.to_thread(create_link, target, link_path):
                link_pass.linked.append(link_path)
                logger.debug("Linked %s -> %s", link_path, target)
            else:
                logger.debug("Link already present: %s", link_path)

        manifest = await load_manifest(manifest_path)
        branch = (*ancestry, name)
        await fan_out(
            self.link_package(dep, package_dir, link_pass, branch)
            for dep in manifest.dependencies
        )
